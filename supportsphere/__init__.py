"""
SupportSphere ticket data layer

Client-side repositories for tickets, conversations and notifications on top
of Supabase.
"""
__version__ = "0.1.0"
