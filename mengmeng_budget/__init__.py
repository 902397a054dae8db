"""
MengMeng Budget (萌萌记账) - Client Package

A typed Python client for the MengMeng Budget bookkeeping backend,
plus the screen logic of the mobile app that does not depend on a UI.

DESIGN PRINCIPLES:
1. One method per backend endpoint, no hidden protocol
2. Fail loudly: every failure is an exception or an explicit (ok, message)
3. The auth token is the only shared mutable state
4. Every user action is logged
"""

__version__ = "1.0.0"
__author__ = "MengMeng Budget Team"
