"""
RetinaScan Backend Application root package.

This package contains the FastAPI app entry point (main.py), API routes,
domain models, and the inference-service client (endpoint failover, retry,
health probing, and simulation fallback).
"""
