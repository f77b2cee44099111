"""callergate models package.

Defines the data contracts shared by the checker and its callers:

  - decision.py: Decision enum and CallerRequest
"""
