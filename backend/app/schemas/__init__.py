# Schemas package init
"""
VoterReg Backend — Pydantic Schemas
====================================

Request and response contracts; see application.py.
"""
