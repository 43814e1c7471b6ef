"""Test suite for formstate.

This package contains tests for:
- Field validation rules and rule composition
- Schema aggregation into whole-form validators
- The form reducer and status transitions
- Event emission and serialization
- The form controller lifecycle (change, blur, submit, reset)
"""
