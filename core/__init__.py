"""
Core module for shared domain infrastructure.

This module contains:
- Domain events, exceptions and value objects
- The in-process event bus and its handlers
- Middleware, metrics and tracing setup
- Health check views
"""
