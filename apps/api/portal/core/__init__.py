"""Core application components.

This module provides the foundational components for the Portal API:
- Database client management via Prisma
- Application settings and configuration
"""
