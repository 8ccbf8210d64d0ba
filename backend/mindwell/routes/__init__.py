"""
MindWell Backend — API Routes Package
=====================================

What:  HTTP route handlers.

Route Inventory:
    - auth.py:     POST /api/register, POST /api/login, GET /api/user
    - journal.py:  /api/journal-entries (list, create, read, patch, delete)
    - mood.py:     GET/POST /api/mood
    - catalog.py:  /api/mindfulness-sessions[...], /api/reflection-prompts[...]
    - billing.py:  POST /api/create-subscription, POST /api/stripe-webhook,
                   POST /api/mock-premium (non-production only)
    - insights.py: GET /api/insights/...
    - health.py:   GET /health

Design Principle:
    Routes stay thin: validate the body, resolve identity and ownership
    through dependencies, call the store or a service, shape the response.
"""
