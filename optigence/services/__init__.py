"""
Services module - business logic behind the routers.

- cross_module_service: detect and execute hand-offs between modules
- module_service: one-shot assistants for OptiMail, OptiHire, OptiTrip, OptiShop
- diagnostics_service: connectivity report for every external dependency
"""
