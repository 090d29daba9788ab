"""Mint an HS256 session token for the nippo backend.

Tokens are provisioned out of band; the claims carry the actor the
authorization policy evaluates. Signing uses the backend's own encoder.

Usage:
  export NIPPO_JWT_SECRET="your-secret"
  python scripts/generate_jwt.py --sub tanaka --role MANAGER --employee-id 10
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Any, Optional


ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from nippo.security.auth import JWT_SECRET_ENV, encode_jwt  # noqa: E402
from nippo.security.roles import Role  # noqa: E402


def make_jwt(
    *,
    sub: str,
    role: Role,
    employee_id: Optional[int],
    manager_id: Optional[int],
    secret: str,
    exp_seconds: int,
) -> str:
    claims: dict[str, Any] = {
        "sub": sub,
        "role": role.value,
        "employee_id": employee_id,
        "manager_id": manager_id,
        "exp": int(time.time()) + exp_seconds,
    }
    return encode_jwt(claims, secret=secret.encode("utf-8"))


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sub", required=True)
    ap.add_argument("--role", required=True, choices=[r.name for r in Role])
    ap.add_argument("--employee-id", type=int, default=None)
    ap.add_argument("--manager-id", type=int, default=None)
    ap.add_argument("--exp-seconds", type=int, default=60 * 60 * 24 * 30)  # 30 days
    args = ap.parse_args()

    secret = os.environ.get(JWT_SECRET_ENV)
    if not secret:
        raise SystemExit(f"Missing {JWT_SECRET_ENV} in environment.")

    token = make_jwt(
        sub=args.sub,
        role=Role[args.role],
        employee_id=args.employee_id,
        manager_id=args.manager_id,
        secret=secret,
        exp_seconds=args.exp_seconds,
    )
    print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
