"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from campushub.obs import logging as obs_logging
from campushub.obs import middleware
from campushub.settings import settings

_initialised = False


def init(app: FastAPI) -> None:
	global _initialised
	if _initialised:
		return
	if settings.obs_enabled:
		obs_logging.configure_logging()
	# Installed either way; the middleware owns the X-Request-Id header.
	middleware.install(app, enabled=settings.obs_enabled)
	_initialised = True


__all__ = ["init"]
