"""
Tastebook - Data services.

One module per resource. Every function takes a Supabase client first.
"""
