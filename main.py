"""
Finance Chat CLI

Interactive front end for the command router:
- AI tool selection when OPENAI_API_KEY is configured
- Pattern fallback otherwise (and whenever the AI path fails)
- In-memory finance services, nothing persisted
"""

import json
import sys
import uuid

from app.config import ENABLE_FILE_LOGGING, LOG_FILE_PATH, LOG_LEVEL, validate_config
from core.agent import Router
from core.memory import ConversationMemory
from infra.env import has_openai_key
from infra.logger import logger_router, setup_logging
from tools.finance.memory import in_memory_services
from tools.llm.completion import CompletionService
from tools.math.calculate import ParseError, calculate_expression
from tools.registry import build_registry
from tools.schemas import NoMatch


CLI_CALLER_ID = "cli-user"


# ═══════════════════════════════════════════════════════════════════════════════
# CLI INTERFACE
# ═══════════════════════════════════════════════════════════════════════════════

class CLI:
    """
    Command-line interface for the finance router.

    Every message goes through Router.route(); results are printed as JSON.
    """

    def __init__(self, router: Router, memory: ConversationMemory, caller_id: str = CLI_CALLER_ID):
        self.router = router
        self.memory = memory
        self.caller_id = caller_id
        self.session_queries = 0
        self.session_no_match = 0

    def run(self):
        """Start interactive CLI session"""
        self._print_welcome()

        while True:
            try:
                query = self._get_input()

                if not query:
                    continue

                if query.lower() in ('exit', 'quit', 'q'):
                    self._handle_exit()
                    break

                if query.lower() in ('help', 'h', '?'):
                    self._print_help()
                    continue

                if query.lower().startswith("/calc"):
                    self._handle_calc(query[len("/calc"):].strip())
                    continue

                self._handle_message(query)

            except KeyboardInterrupt:
                print("\n")
                self._handle_exit()
                break

            except Exception as e:
                print(f"\n❌ Error: {str(e)}\n")
                logger_router.error(f"CLI_ERROR | error={str(e)}")

    def _handle_message(self, query: str):
        self.session_queries += 1
        request_id = str(uuid.uuid4())[:8]

        context = self.memory.context_for(self.caller_id)
        outcome = self.router.route(query, self.caller_id, context=context, request_id=request_id)

        self.memory.add(self.caller_id, "user", query)

        if isinstance(outcome, NoMatch):
            self.session_no_match += 1
            self._print_no_match(outcome)
            return

        self.memory.add(self.caller_id, "assistant", outcome.message or str(outcome.error))
        self._print_json(outcome.model_dump(mode="json"))

    def _handle_calc(self, expression: str):
        try:
            result = calculate_expression(expression)
        except ParseError as e:
            print(f"\n❌ {str(e)}\n")
            return
        self._print_json(result.model_dump(mode="json"))

    def _handle_exit(self):
        summary = self.memory.get_session_summary()
        print("\n📊 Session Statistics:")
        print(f"   Started: {summary['started_at']}")
        print(f"   Messages routed: {self.session_queries}")
        print(f"   Not understood: {self.session_no_match}")
        self._print_goodbye()

    def _get_input(self) -> str:
        """Get user input with prompt"""
        try:
            return input("\nKamu: ").strip()
        except EOFError:
            return "exit"

    @staticmethod
    def _print_json(payload: dict):
        print()
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        print()

    @staticmethod
    def _print_no_match(outcome: NoMatch):
        print("\nMaaf, aku belum paham maksudnya.")
        if outcome.suggestions:
            print("Coba misalnya:")
            for suggestion in outcome.suggestions:
                print(f"  - {suggestion}")
        print()

    def _print_welcome(self):
        mode = "AI + pattern fallback" if self.router.completion else "pattern only"
        print("=" * 60)
        print("  Finance Chat Router")
        print("=" * 60)
        print()
        print(f"  Mode: {mode}")
        print("  Commands: help | /calc <expression> | exit")
        print()

    def _print_help(self):
        print()
        print("Available commands:")
        print("  help, h, ?          - Show this help message")
        print("  /calc <expression>  - Evaluate an expression without recording it")
        print("  exit, quit          - Exit the application")
        print()
        print("Examples:")
        print('  "beli kopi 25rb"')
        print('  "beli 5kg ayam @ 10rb"')
        print('  "gaji bulan ini 5 juta"')
        print('  "budget makanan 1 juta per bulan"')
        print('  "tambah saldo 50rb"')
        print('  "laporan bulan ini"          (AI mode)')
        print('  "lihat semua kategori"       (AI mode)')
        print()

    def _print_goodbye(self):
        print()
        print(f"Processed {self.session_queries} messages this session.")
        print("Sampai jumpa! 👋")
        print()


# ═══════════════════════════════════════════════════════════════════════════════
# COMPOSITION ROOT
# ═══════════════════════════════════════════════════════════════════════════════

def build_router() -> Router:
    """Wire services, registry and (optionally) the completion service"""
    registry = build_registry(in_memory_services())

    completion = None
    if has_openai_key():
        completion = CompletionService()
    else:
        logger_router.warning("OPENAI_API_KEY not set, running pattern fallback only")

    return Router(registry, completion=completion)


def main():
    """
    Main entry point for the application.

    Sets up logging, validates configuration, and starts the CLI.
    """
    try:
        setup_logging(
            level=LOG_LEVEL,
            log_file=LOG_FILE_PATH if ENABLE_FILE_LOGGING else None
        )

        logger_router.info("=" * 60)
        logger_router.info("Finance Chat Router Starting")
        logger_router.info("=" * 60)

        validate_config()
        logger_router.info("Configuration valid [OK]")

        cli = CLI(build_router(), ConversationMemory())
        cli.run()

        logger_router.info("Finance Chat Router Stopped")

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(0)

    except Exception as e:
        logger_router.error(f"STARTUP_ERROR | error={str(e)}")
        print(f"\n❌ Startup error: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
