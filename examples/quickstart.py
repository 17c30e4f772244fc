#!/usr/bin/env python3
"""f5xc-blindfold quickstart -- seal a secret and build an unseal document.

Demonstrates the sealing workflow:

1. Create an API client for the tenant.
2. Fetch the tenant public key and a secret policy document.
3. Seal a plaintext with an isolated vesctl.
4. Write a JSON document that ``f5xc-unseal`` can consume inside a
   workload running next to Wingman.

Environment:
    VOLT_API_URL        Tenant API URL, e.g. https://acme.console.ves.volterra.io/api
    VOLT_API_P12_FILE   PKCS#12 client bundle (or set VOLTERRA_TOKEN instead)
    VES_P12_PASSWORD    Passphrase for the bundle
    VOLTERRA_TOKEN      API token

Run:
    python examples/quickstart.py shared my-secret-policy /etc/app/config.ini
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

from f5xc_blindfold import (
    BlindfoldError,
    blindfold,
    create_client,
    get_public_key,
    get_secret_policy_document,
)


async def main(namespace: str, policy_name: str, target_path: str) -> int:
    # -- Step 1: Authenticated API client ------------------------------------
    client = create_client(
        os.environ.get("VOLT_API_URL"),
        p12_path=os.environ.get("VOLT_API_P12_FILE"),
        p12_passphrase=os.environ.get("VES_P12_PASSWORD", ""),
        token=os.environ.get("VOLTERRA_TOKEN"),
    )

    async with client:
        # -- Step 2: Sealing inputs ------------------------------------------
        public_key = await get_public_key(client)
        if public_key is None:
            print("No public key is available for this tenant", file=sys.stderr)
            return 1
        print(f"[2] Public key version {public_key.key_version} for {public_key.tenant}")

        policy = await get_secret_policy_document(client, policy_name, namespace)
        if policy is None:
            print(f"Secret policy {namespace}/{policy_name} not found", file=sys.stderr)
            return 1
        print(f"[2] Policy document {policy.policy_id}")

    # -- Step 3: Seal --------------------------------------------------------
    # The ambient VOLT_API_* / VOLTERRA_TOKEN variables above are never seen
    # by vesctl; it runs with decoy credentials only.
    sealed = await blindfold(b"password=correct horse battery staple\n", public_key, policy)
    print(f"[3] Sealed {len(sealed)} bytes")

    # -- Step 4: Unseal document ---------------------------------------------
    json.dump({target_path: sealed.decode("ascii")}, sys.stdout, indent=2)
    print()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 4:
        print(__doc__, file=sys.stderr)
        raise SystemExit(2)
    try:
        raise SystemExit(asyncio.run(main(*sys.argv[1:])))
    except BlindfoldError as exc:
        print(json.dumps(exc.to_dict(), indent=2), file=sys.stderr)
        raise SystemExit(1) from exc
