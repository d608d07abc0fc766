"""
FastAPI gateway between the whiteboard and an OpenAI-compatible chat model.
"""
