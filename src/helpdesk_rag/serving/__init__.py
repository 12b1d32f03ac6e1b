"""
Serving — FastAPI application exposing upload and ask endpoints.

The routes are plumbing only: they validate the HTTP request, hand bytes
or a question to the pipelines, and map pipeline errors to status codes.
"""
