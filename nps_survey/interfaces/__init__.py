"""
Abstract interfaces for the NPS survey system.

These interfaces define the contracts that concrete implementations
must adhere to, following the Dependency Inversion Principle.

This package contains:
- Repository interfaces for data access
- Provider interfaces for external storage adapters
- Service interfaces for business logic components
- Guardrail interfaces for input processing
"""
