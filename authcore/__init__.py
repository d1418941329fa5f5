"""
Account authentication core.

This package manages user identity verification, credential validation,
one-time passcodes, and the lifecycle of access and refresh tokens, including
sign-in with an OAuth provider and password recovery. HTTP routing,
persistence engines and mail transport are left to thin adapters around it.

Quick start
-----------

.. code-block:: python

   from authcore import config, factory

   settings = config.load()            # Reads JWT_SECRET etc. once.
   orchestrator = factory.create_orchestrator(settings)
   result = orchestrator.signup('a@x.com', 'Ann', 'pw123')
   result.access_token

The web layer can hand request data to the functions in
:mod:`authcore.controllers`, which return a body, a status code and headers.
"""

from .config import Settings
from .domain import Account, AuthResult, ProviderProfile, TokenPair
from .orchestrator import AuthOrchestrator
