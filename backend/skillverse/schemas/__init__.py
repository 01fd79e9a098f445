"""
Pydantic request/response schemas for the Skillverse API.
"""
