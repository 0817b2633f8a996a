"""
Domain layer for the contact form relay.

This layer contains:
- Data models (submissions, relay results, form states)
- Relay logic (validate, configure, forward with retries)
- Client-side form logic (validate, submit with retries)
"""
