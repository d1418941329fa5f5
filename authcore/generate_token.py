"""
Helper script for generating an access token.

Be sure that you are using the same secret when running this script as when
you run the service. Set ``JWT_SECRET=somesecret`` in your environment to
ensure that the same secret is always used.

.. code-block:: bash

   $ JWT_SECRET=foosecret authcore-token
   Account ID: 7b0e4bb6-0c36-4a53-a9f8-2f3b0b6f9c1e
   Email address: joe@bloggs.com
   Verified [Y/n]:

   eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...

Use the token in requests to authorized endpoints.
"""

from typing import Optional

import click

from . import config
from .domain import Account
from .exceptions import SigningError
from .tokens import TokenIssuer


@click.command()
@click.option('--account-id', prompt='Account ID')
@click.option('--email', prompt='Email address')
@click.option('--verified/--unverified', prompt='Verified', default=True)
@click.option('--ttl', type=int, default=None,
              help='Lifetime in seconds. Defaults to ACCESS_TOKEN_EXPIRES_IN.')
def generate_token(account_id: str, email: str, verified: bool = True,
                   ttl: Optional[int] = None) -> None:
    """Generate an access token for dev/testing purposes."""
    settings = config.load()
    if ttl is not None:
        settings = settings._replace(access_token_expires_in=ttl)
    account = Account(account_id=account_id, email=email, name='',
                      verified=verified)
    try:
        token = TokenIssuer(settings).issue_access(account)
    except SigningError as e:
        raise click.ClickException(str(e)) from e
    click.echo(token)


if __name__ == '__main__':
    generate_token()
