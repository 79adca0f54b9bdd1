"""Interactive CLI simulator — walk through the OTP login flow by hand."""

import asyncio
import shlex

from otp_login.config import settings
from otp_login.errors import OtpLoginError
from otp_login.main import configure_logging, lifespan

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"

HELP = (
    f"{DIM}Commands:\n"
    "  register \"<name>\" <email> <secret> [external_ref]\n"
    "  request <email>\n"
    "  verify <email> <code>\n"
    f"  quit{RESET}"
)


def parse_command(line: str) -> list[str]:
    """Split a console line, honouring quotes so names may contain spaces."""
    return shlex.split(line)


async def main() -> None:
    print(f"\n{BOLD}{'=' * 52}")
    print("  🔐  OTP Login — Simulator")
    print(f"{'=' * 52}{RESET}\n")
    print(f"{DIM}OTP codes are printed in the log output (preview notifier){RESET}")
    print(HELP + "\n")

    configure_logging(settings.debug)

    preview = settings.model_copy(update={"notifier_backend": "log"})
    async with lifespan(preview) as service:
        while True:
            try:
                line = input(f"{BLUE}{BOLD}>{RESET} ").strip()
            except (KeyboardInterrupt, EOFError):
                print(f"\n{DIM}Goodbye!{RESET}")
                break

            if not line:
                continue
            try:
                command, *args = parse_command(line)
            except ValueError as exc:
                print(f"{RED}{exc}{RESET}")
                continue

            if command == "quit":
                print(f"{DIM}Goodbye!{RESET}")
                break

            try:
                if command == "register" and len(args) in (3, 4):
                    identity = await service.register(*args)
                    print(f"{GREEN}Registered {identity.email}{RESET}")
                elif command == "request" and len(args) == 1:
                    ack = await service.request_otp(args[0])
                    print(f"{GREEN}{ack.message}{RESET}")
                elif command == "verify" and len(args) == 2:
                    profile = await service.verify_otp(args[0], args[1])
                    print(
                        f"{GREEN}✅ Welcome, {profile.display_name} "
                        f"({profile.external_account_ref or 'no linked account'}){RESET}"
                    )
                else:
                    print(HELP)
            except OtpLoginError as exc:
                print(f"{RED}{exc.status_code} {type(exc).__name__}: {exc.detail}{RESET}")


if __name__ == "__main__":
    asyncio.run(main())
