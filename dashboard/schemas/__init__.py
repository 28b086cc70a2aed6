"""
Pydantic schemas for API request and response validation.

Request models are strict. Response models mirror the Supabase rows the
dashboard reads, with optional fields wherever the column is nullable.
"""
