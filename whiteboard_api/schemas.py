# -*- coding: utf-8 -*-
from __future__ import annotations
from typing import Literal, Optional
from pydantic import BaseModel, Field

# Field names follow the RPC wire format used by the front end (camelCase).

class AskAIRequest(BaseModel):
    question: str = Field(..., min_length=1, description="Question is required")
    # base64 PNG without prefix; a full data URL is accepted too
    imageData: Optional[str] = None

class AskAIResponse(BaseModel):
    answer: str

class GenerateIdeaRequest(BaseModel):
    imageData: Optional[str] = None

class GenerateIdeaResponse(BaseModel):
    idea: str

class LogoutResponse(BaseModel):
    success: Literal[True] = True

class Health(BaseModel):
    status: Literal["ok"] = "ok"
    model: Optional[str] = None
    base_url: Optional[str] = None
