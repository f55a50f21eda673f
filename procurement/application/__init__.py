"""Application layer: use cases, DTOs, ports and pure policies.

Depends on domain only; infrastructure implements the ports.
"""
