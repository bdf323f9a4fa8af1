from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Iterable, List, Optional, TextIO

from application.services.health import HealthManager, HostAllowlist, ProbeTimeoutConfig
from application.use_cases import CheckOnlineUseCase, HealthStatusUseCase
from config import settings
from core.logging.logger import StructuredLogger, get_logger

# HTTP-style status of a use case response -> process exit code
EXIT_CODES = {200: 0, 503: 1, 400: 2}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    # accepted before or after the subcommand
    common.add_argument("--pretty", action="store_true", default=argparse.SUPPRESS, help="Indent JSON output")

    p = argparse.ArgumentParser(prog="netcheck", description="Reachability checks for allowlisted upstream hosts")
    p.add_argument("--pretty", action="store_true", help="Indent JSON output")
    sub = p.add_subparsers(dest="command", required=True)

    online = sub.add_parser("online", parents=[common], help="TCP + TLS check of one allowlisted host")
    online.add_argument("--host", required=True, help="Target hostname (must be allowlisted)")
    online.add_argument("--port", required=True, help=f"Target port (must be {settings.HEALTH_ALLOWED_PORT})")
    online.add_argument("--timeout-ms", dest="timeout_ms", default=None, help="Timeout in milliseconds (default: 3000)")

    sub.add_parser("status", parents=[common], help="Health of all configured upstream services")
    sub.add_parser("hosts", parents=[common], help="List hosts allowed as probe targets")
    return p


class HealthCommand:
    """Health checks from the command line or an interactive menu."""

    def __init__(
        self,
        manager: Optional[HealthManager] = None,
        allowlist: Optional[HostAllowlist] = None,
        *,
        out: Optional[TextIO] = None,
    ) -> None:
        self.logger: StructuredLogger = get_logger(__name__, service="health")
        self.timeout = ProbeTimeoutConfig.from_env()
        self.manager = manager or HealthManager.default(self.logger)
        self.allowlist = allowlist or HostAllowlist.from_settings()
        self.out = out or sys.stdout
        self.pretty = False

    def _emit(self, payload: Any) -> None:
        indent = 2 if self.pretty else None
        separators = None if self.pretty else (",", ":")
        print(json.dumps(payload, indent=indent, separators=separators, ensure_ascii=False), file=self.out)

    async def online(self, host: Optional[str], port: Optional[str], timeout_ms: Optional[str] = None) -> int:
        use_case = CheckOnlineUseCase(self.manager, self.allowlist, timeout=self.timeout)
        status, envelope = await use_case.execute(host, port, timeout_ms)
        self._emit(envelope)
        return EXIT_CODES[status]

    async def status(self) -> int:
        status, envelope = await HealthStatusUseCase(self.manager, self.allowlist).execute()
        self._emit(envelope)
        return EXIT_CODES[status]

    def hosts(self) -> int:
        self._emit({"data": self.allowlist.allowed_hosts(), "error": None})
        return 0

    async def run(self, argv: Optional[Iterable[str]] = None) -> int:
        args = build_parser().parse_args(list(argv) if argv is not None else None)
        self.pretty = args.pretty
        self.logger.debug(lambda: f"command {args.command}")
        if args.command == "online":
            return await self.online(args.host, args.port, args.timeout_ms)
        if args.command == "status":
            return await self.status()
        return self.hosts()

    async def run_interactive(self) -> int:
        while True:
            print("\n=== Health Command ===")
            print("1) Check a host")
            print("2) Status of all services")
            print("3) List allowed hosts")
            print(f"4) Toggle pretty JSON (currently: {'ON' if self.pretty else 'OFF'})")
            print("5) Back")
            choice = input("Choose an option: ").strip()
            if choice == "1":
                host = self._choose_host_ui()
                if host:
                    timeout_ms = input(f"Timeout ms [{self.timeout.default_timeout_ms}]: ").strip() or None
                    await self.online(host, str(settings.HEALTH_ALLOWED_PORT), timeout_ms)
                else:
                    print("No host selected.")
            elif choice == "2":
                await self.status()
            elif choice == "3":
                self.hosts()
            elif choice == "4":
                self.pretty = not self.pretty
                print(f"Pretty JSON {'ENABLED' if self.pretty else 'DISABLED'}")
            elif choice == "5":
                return 0
            else:
                print("Invalid option.")

    def _choose_host_ui(self) -> Optional[str]:
        hosts: List[str] = self.allowlist.allowed_hosts()
        print("\nAllowed hosts:")
        for idx, h in enumerate(hosts, start=1):
            print(f"{idx:2d}) {h}")
        sel = input("Select (0 to cancel): ").strip()
        try:
            i = int(sel)
        except ValueError:
            return None
        if 1 <= i <= len(hosts):
            return hosts[i - 1]
        return None


async def run(argv: Optional[Iterable[str]] = None) -> int:
    return await HealthCommand().run(argv)
