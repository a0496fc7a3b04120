"""
Use cases for the roster app.

Routers call the FormController; the controller drives the RosterStore, which
persists through RosterStorage and notifies the RosterRenderer.
"""
