"""
MindWell Backend — Services Package
===================================

What:  Business logic that spans more than one store call or talks to an
       external system.

Service Inventory:
    - auth_service.py:     registration, login, token issue
    - catalog_service.py:  premium filtering of sessions and prompts
    - billing_service.py:  premium upgrade and payment lifecycle
    - stripe_service.py:   Stripe REST client (retries, circuit breaker, webhooks)
    - payment_base.py:     PaymentProcessor contract
    - insights_service.py: streaks, groupings, mood scores and calendars

Plain CRUD on journal and mood entries needs no service: routes call the
EntityStore directly after validation and the ownership check.
"""
