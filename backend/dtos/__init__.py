"""
Data Transfer Objects (DTOs) Layer

This package contains DTOs that decouple service inputs and outputs from the
database models.

Structure:
- request/: Validated input for mutating service operations
- internal/: Results passed between services and back to callers
"""
