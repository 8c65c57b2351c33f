"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the domain
service and its infrastructure adapters into routes. Adapters live on
``app.state`` (created during lifespan startup), so tests can swap them
without touching module globals.
"""

from datetime import timedelta

from fastapi import Depends, Request

from authflow.config.settings import Settings, get_settings
from authflow.domain.auth import AuthService
from authflow.domain.ports import EmailSender, UserRepository


def get_repository(request: Request) -> UserRepository:
    """Get the account repository from app state."""
    return request.app.state.repository


def get_email_sender(request: Request) -> EmailSender:
    """Get the email sender from app state."""
    return request.app.state.email_sender


def get_auth_service(
    repository: UserRepository = Depends(get_repository),
    email_sender: EmailSender = Depends(get_email_sender),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    """
    Create auth service with injected dependencies.

    Wires together the repository, email sender and security settings.
    """
    return AuthService(
        repository=repository,
        email_sender=email_sender,
        bcrypt_rounds=settings.bcrypt_cost,
        code_ttl=timedelta(seconds=settings.code_ttl_seconds),
    )
