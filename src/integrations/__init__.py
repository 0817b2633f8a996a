"""
Clients for the HTTP services the relay talks to: EmailJS upstream and
the relay endpoint itself (as called by the contact form).
"""
