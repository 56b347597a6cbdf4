"""
Serving — FastAPI application for the RAG chatbot.

This module exposes the chat service over HTTP (request/response and
session routes) and over a websocket that streams answers incrementally.
"""
