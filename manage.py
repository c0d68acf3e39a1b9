#!/usr/bin/env python3
"""
HiLo Users — local development tool

Single entry point for running, migrating, seeding and testing the service.
Usage: python manage.py <command> [options]
"""

import json
import logging
import os
import subprocess
import sys
import urllib.error
import urllib.parse
import urllib.request
from datetime import datetime
from typing import List, Optional


BACKEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "backend")
BASE_URL = os.getenv("HILO_BASE_URL", "http://localhost:8000")


# ═══════════════════════════════════════════════════════════
#  Logging Setup
# ═══════════════════════════════════════════════════════════

class ColorFormatter(logging.Formatter):
    """Console formatter with ANSI colors and level symbols."""

    COLORS = {
        "INFO": "\033[96m",        # Cyan
        "SUCCESS": "\033[92m",     # Green
        "WARNING": "\033[93m",     # Yellow
        "ERROR": "\033[91m",       # Red
        "DEBUG": "\033[94m",       # Blue
        "HEADER": "\033[95m",      # Magenta
        "BOLD": "\033[1m",
        "RESET": "\033[0m",
    }

    SYMBOLS = {
        "INFO": "→",
        "SUCCESS": "✓",
        "WARNING": "⚠",
        "ERROR": "✗",
        "DEBUG": "•",
        "STEP": "▶",
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.platform != "win32"

    def _colorize(self, text: str, color_name: str) -> str:
        if not self.use_colors:
            return text
        color = self.COLORS.get(color_name, "")
        return f"{color}{text}{self.COLORS['RESET']}" if color else text

    def format(self, record: logging.LogRecord) -> str:
        msg = str(record.msg)

        for marker in ("SUCCESS", "WARNING", "ERROR", "STEP"):
            if f"[{marker}]" in msg:
                symbol = self.SYMBOLS[marker]
                color = "INFO" if marker == "STEP" else marker
                msg = msg.replace(f"[{marker}] ", "")
                break
        else:
            symbol, color = self.SYMBOLS.get(record.levelname, ""), record.levelname

        if symbol and not msg.startswith(("===", " ", "\n")):
            msg = f"{symbol} {msg}"

        if msg.lstrip("\n").startswith("==="):
            color = "HEADER"
        record.msg = self._colorize(msg, color)
        return super().format(record)


# --- Bootstrap logger --------------------------------------------------------
_log_dir = "logs"
os.makedirs(_log_dir, exist_ok=True)
_log_file = os.path.join(_log_dir, f"manage-{datetime.now():%Y%m%d}.log")

_file_handler = logging.FileHandler(_log_file, encoding="utf-8")
_file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))

_console_handler = logging.StreamHandler()
_console_handler.setFormatter(ColorFormatter())

logging.basicConfig(level=logging.INFO, handlers=[_file_handler, _console_handler])
logger = logging.getLogger("manage")


# ═══════════════════════════════════════════════════════════
#  Dev Manager
# ═══════════════════════════════════════════════════════════

class DevManager:
    """Runs the service's day-to-day commands from the backend directory."""

    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url.rstrip("/")

    # ─── Helpers ──────────────────────────────────────────
    def _run(self, cmd: List[str], check: bool = True) -> subprocess.CompletedProcess:
        logger.info(f"[STEP] Running: {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, check=check, cwd=BACKEND_DIR)
        except subprocess.CalledProcessError as exc:
            logger.error(f"Command failed (exit {exc.returncode})")
            raise

    def _get(self, path: str, **params: object) -> tuple:
        """GET an endpoint and return (status, body text)."""
        query = f"?{urllib.parse.urlencode(params)}" if params else ""
        try:
            with urllib.request.urlopen(f"{self.base_url}{path}{query}", timeout=10) as resp:
                return resp.status, resp.read().decode()
        except urllib.error.HTTPError as exc:
            return exc.code, exc.read().decode()

    # ─── Server ───────────────────────────────────────────
    def serve(self, port: int = 8000, reload: bool = False) -> None:
        """Start the API with uvicorn."""
        logger.info("\n=== HiLo Users API ===")
        cmd = [sys.executable, "-m", "uvicorn", "app.main:app", "--port", str(port)]
        if reload:
            cmd.append("--reload")
        self._run(cmd)

    # ─── Database ─────────────────────────────────────────
    def init_db(self) -> None:
        """Run Alembic migrations."""
        logger.info("\n=== Database Initialisation ===")
        logger.info("[STEP] Running Alembic migrations…")
        self._run([sys.executable, "-m", "alembic", "upgrade", "head"])
        logger.info("[SUCCESS] Database migrations applied!")

    def seed(self) -> None:
        """Run the seed script."""
        logger.info("\n=== Seeding Database ===")
        logger.info("[STEP] Inserting development seed data…")
        self._run([sys.executable, "-m", "scripts.seed_users"])
        logger.info("[SUCCESS] Seed data inserted!")

    # ─── Tests ────────────────────────────────────────────
    def test(self, extra: Optional[List[str]] = None) -> None:
        """Run the pytest suite."""
        logger.info("\n=== Test Suite ===")
        self._run([sys.executable, "-m", "pytest", *(extra or [])])
        logger.info("[SUCCESS] Tests passed!")

    def smoke(self) -> None:
        """Create, look up and delete a throwaway user against a running server."""
        logger.info(f"\n=== Smoke Test ({self.base_url}) ===")

        status, body = self._get("/health")
        if status != 200:
            logger.error(f"[ERROR] Health check failed: {status} {body}")
            return
        logger.info(f"[SUCCESS] Health: {json.loads(body)}")

        email = f"smoke-{datetime.now():%H%M%S}@example.com"
        status, body = self._get("/create", email=email, name="Smoke")
        logger.info(f"  /create → {status} {body}")
        status, body = self._get("/get-by-email", email=email)
        logger.info(f"  /get-by-email → {status} {body}")
        if status == 200:
            user_id = body.rsplit(" ", 1)[-1]
            status, body = self._get("/delete", id=user_id)
            logger.info(f"  /delete → {status} {body}")
        status, body = self._get("/get-by-email", email=email)
        if status == 404:
            logger.info("[SUCCESS] Round trip complete")
        else:
            logger.warning(f"[WARNING] Expected 404 after delete, got {status} {body}")

    # ─── URLs ─────────────────────────────────────────────
    def urls(self) -> None:
        """Print access URLs."""
        logger.info("\n=== Access URLs ===")
        logger.info(f"  Backend API:   {self.base_url}")
        logger.info(f"  Swagger Docs:  {self.base_url}/docs")
        logger.info(f"  Health Check:  {self.base_url}/health")


# ═══════════════════════════════════════════════════════════
#  CLI
# ═══════════════════════════════════════════════════════════

USAGE = f"""
{ColorFormatter.COLORS['HEADER']}HiLo Users — Development Tool{ColorFormatter.COLORS['RESET']}
{'═' * 50}

{ColorFormatter.COLORS['BOLD']}Usage:{ColorFormatter.COLORS['RESET']} python manage.py <command> [options]

{ColorFormatter.COLORS['BOLD']}Commands:{ColorFormatter.COLORS['RESET']}
    {ColorFormatter.COLORS['INFO']}serve{ColorFormatter.COLORS['RESET']}           Start the API (--port=N, --reload)
    {ColorFormatter.COLORS['INFO']}init-db{ColorFormatter.COLORS['RESET']}         Run Alembic migrations
    {ColorFormatter.COLORS['INFO']}seed{ColorFormatter.COLORS['RESET']}            Insert development seed users
    {ColorFormatter.COLORS['INFO']}test{ColorFormatter.COLORS['RESET']}            Run pytest (extra args are passed through)
    {ColorFormatter.COLORS['INFO']}smoke{ColorFormatter.COLORS['RESET']}           Round-trip a user against a running server
    {ColorFormatter.COLORS['INFO']}urls{ColorFormatter.COLORS['RESET']}            Show access URLs

{ColorFormatter.COLORS['BOLD']}Examples:{ColorFormatter.COLORS['RESET']}
    python manage.py init-db
    python manage.py serve --reload
    python manage.py test -k allocator
"""


def main() -> None:
    if len(sys.argv) < 2 or sys.argv[1] in ("-h", "--help"):
        print(USAGE)
        sys.exit(0)

    command = sys.argv[1]
    opts = sys.argv[2:]

    mgr = DevManager()

    try:
        if command == "serve":
            port = 8000
            for o in opts:
                if o.startswith("--port="):
                    port = int(o.split("=", 1)[1])
            mgr.serve(port=port, reload="--reload" in opts)
        elif command == "init-db":
            mgr.init_db()
        elif command == "seed":
            mgr.seed()
        elif command == "test":
            mgr.test(opts)
        elif command == "smoke":
            mgr.smoke()
        elif command == "urls":
            mgr.urls()
        else:
            logger.error(f"Unknown command: {command}")
            print(USAGE)
            sys.exit(1)
    except Exception as exc:
        logger.error(f"Operation failed: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
