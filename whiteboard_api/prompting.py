# -*- coding: utf-8 -*-
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Operation(str, Enum):
    ASK = "ask"
    IDEA = "idea"


# Shared formatting directives. They are instructions to the model only; the
# returned text is never reformatted on our side.
MATH_RULES = (
    "IMPORTANT: When writing mathematical formulas, ALWAYS use LaTeX notation enclosed in dollar signs:\n"
    "- For inline formulas, use single dollar signs: $formula$\n"
    "- For display formulas, use double dollar signs: $$formula$$\n"
)
MATH_EXAMPLES = "- Examples: $f(x) = x^{0.5} \\cdot y^{0.5}$ or $f'(x) = 0.5 \\cdot x^{-0.5} \\cdot y^{0.5}$\n"
PLAIN_TEXT_RULE = "NOTE: Do NOT use markdown formatting like ** for bold text. Use plain text with clear line breaks instead."

# ============ Ask: vision (canvas snapshot attached) ============
ASK_VISION = (
    "You are an AI assistant for an online whiteboard. Analyze the attached whiteboard image and respond in the following format:\n"
    "\n"
    "1. Concise description of the current drawing (objectively describe what is drawn)\n"
    "2. Answer to the user's question: {question}\n"
    "\n"
    "Provide specific and practical advice or answers to the user's question, taking into account the drawing content, in English.\n"
    "\n"
    + MATH_RULES + MATH_EXAMPLES + "\n" + PLAIN_TEXT_RULE
)

# ============ Ask: text only ============
ASK_TEXT = (
    "You are an AI assistant for an online whiteboard. Please answer the user's question concisely in English.\n"
    "\n"
    "Question: {question}\n"
    "\n"
    "If the question is about drawing, sketching, or organizing ideas, provide specific and practical advice.\n"
    "\n"
    + MATH_RULES + MATH_EXAMPLES + "\n" + PLAIN_TEXT_RULE
)

# ============ Idea: develop the current drawing ============
IDEA_VISION = (
    "Analyze the attached whiteboard image and propose drawing ideas that build upon (complete) the current drawing.\n"
    "\n"
    "Please respond in the following format:\n"
    "\n"
    "1. Analysis of the current drawing (briefly describe what is drawn and its state)\n"
    "2. Idea for development/completion (how to develop the current drawing)\n"
    "3. Elements to add (colors, shapes, text, decorations, etc.)\n"
    "4. Specific steps to completion (step-by-step explanation)\n"
    "\n"
    "Provide practical advice in English to make the work more attractive and complete, while leveraging the good parts of the current drawing.\n"
    "\n"
    + MATH_RULES + "\n" + PLAIN_TEXT_RULE
)

# ============ Idea: blank canvas ============
IDEA_TEXT = (
    "Please suggest one creative idea for drawing on an online whiteboard. Include the following elements:\n"
    "\n"
    "1. Drawing theme (e.g., landscape, abstract art, diagram, mind map, etc.)\n"
    "2. Color suggestions\n"
    "3. Drawing tips and points\n"
    "4. Simple steps to completion\n"
    "\n"
    "Please explain in English in a way that is easy for beginners to understand.\n"
    "\n"
    + MATH_RULES + "\n" + PLAIN_TEXT_RULE
)

TEMPLATES: Dict[Tuple[Operation, bool], str] = {
    (Operation.ASK, True): ASK_VISION,
    (Operation.ASK, False): ASK_TEXT,
    (Operation.IDEA, True): IDEA_VISION,
    (Operation.IDEA, False): IDEA_TEXT,
}

# Text substituted when the completion carries no message text.
FALLBACKS: Dict[Operation, str] = {
    Operation.ASK: "No response received",
    Operation.IDEA: "No idea generated",
}


def select_template(operation: Operation, has_image: bool) -> str:
    return TEMPLATES[(Operation(operation), bool(has_image))]


def render_prompt(operation: Operation, has_image: bool, question: Optional[str] = None) -> str:
    # str.replace instead of str.format: the templates contain literal LaTeX braces.
    return select_template(operation, has_image).replace("{question}", question or "")


def image_data_url(image_data: str, image_mime: str = "image/png") -> str:
    """Return a data URL whether the input is bare base64 or already prefixed."""
    if image_data.startswith("data:"):
        return image_data
    return f"data:{image_mime};base64,{image_data}"


def build_messages(
    operation: Operation,
    question: Optional[str] = None,
    image_data: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    One user message per request:
    - with an image: multi-part content [text, image_url]
    - without: plain string content
    """
    has_image = bool(image_data)
    prompt = render_prompt(operation, has_image, question)
    if has_image:
        content: Any = [
            {"type": "text", "text": prompt},
            {"type": "image_url", "image_url": {"url": image_data_url(image_data)}},
        ]
    else:
        content = prompt
    return [{"role": "user", "content": content}]
