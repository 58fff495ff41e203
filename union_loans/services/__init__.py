"""Application services layer (data access, auth, dashboard compositions).

Services coordinate work across the canonical model and the backend adapter.
They should avoid presentation concerns.
"""
