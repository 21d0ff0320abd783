#!/usr/bin/env python3
"""
AI Codegen - Main Entry Point

Point the tool at a Browserbase session, describe what to do next, and the
generated Playwright statements are appended to the script shown below the
menu. The script can be edited by hand between steps.
"""

import argparse
import sys

from dotenv import load_dotenv
from InquirerPy import inquirer
from InquirerPy.base.control import Choice
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax

from code_generator import CodeGenerator
from codegen_config import CodegenConfig, DebugConfig, ModelConfig
from codegen_orchestrator import CodegenOrchestrator
from notice_observer import NoticeObserver
from session_connector import SessionConnector
from terminal import banner, banner_lines, clear_screen, clear_screen_preserve_banner
from utils.event_logger import EventLogger, set_event_logger


def build_orchestrator(config: CodegenConfig, event_logger: EventLogger) -> CodegenOrchestrator:
    """Wire connector, generator and orchestrator around one event logger."""
    connector = SessionConnector(config.session, event_logger=event_logger)
    generator = CodeGenerator(config.model, config.generation, event_logger=event_logger)
    return CodegenOrchestrator(connector, generator, event_logger=event_logger)


def show_script(orchestrator: CodegenOrchestrator, language: str) -> None:
    text = orchestrator.script.text
    if not text:
        rprint(Panel("[dim]// Playwright JS[/dim]", title="Script"))
        return
    rprint(Panel(Syntax(text, language, line_numbers=True), title="Script"))


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Playwright code from natural-language prompts")
    parser.add_argument("--url", default="", help="Browserbase session URL, session id or website URL")
    parser.add_argument("--model", default=None, help="Model used for code generation")
    parser.add_argument("--debug", action="store_true", help="Print every event")
    return parser.parse_args(argv)


def main(argv=None):
    """Main function"""
    load_dotenv()
    args = parse_args(argv)

    config = CodegenConfig(logging=DebugConfig(debug_mode=args.debug))
    if args.model:
        config.model = ModelConfig(model_name=args.model)

    event_logger = EventLogger(debug_mode=config.logging.debug_mode)
    set_event_logger(event_logger)
    event_logger.register_callback(NoticeObserver())

    orchestrator = build_orchestrator(config, event_logger)
    address = args.url
    prompt = ""

    clear_screen()
    print(banner)

    while True:
        show_script(orchestrator, config.generation.language)
        rprint(f"[bold]Target website:[/bold] {address or '[dim]not set[/dim]'}\n")

        choices = [
            Choice(value="execute", name="Execute - Write a prompt and generate code"),
            Choice(value="target", name="Target website - Set the Browserbase session URL"),
            Choice(value="edit", name="Edit script - Change the generated script by hand"),
            Choice(value="exit", name="Exit"),
        ]
        choice = inquirer.select(
            message="What would you like to do?",
            choices=choices,
            default="execute",
        ).execute()

        clear_screen_preserve_banner(banner_lines)

        if choice == "execute":
            if not orchestrator.is_input_enabled:
                continue
            prompt = inquirer.text(
                message="Write a simple prompt",
                default=prompt,
                long_instruction="e.g. Press the 'sign up' button",
            ).execute()
            result = orchestrator.execute(prompt, address)
            if result.success:
                rprint(f"[green]✅ Added {len(result.fragment)} chars to the script[/green]")
        elif choice == "target":
            if not orchestrator.is_input_enabled:
                continue
            address = inquirer.text(
                message="Target website",
                default=address,
            ).execute().strip()
        elif choice == "edit":
            edited = inquirer.text(
                message="Edit script",
                default=orchestrator.script.text,
                multiline=True,
                long_instruction="ESC + Enter to finish",
            ).execute()
            orchestrator.edit_script(edited)
        elif choice == "exit":
            summary = orchestrator.error_handler.get_error_summary()
            if summary['total_errors'] and config.logging.debug_mode:
                rprint(summary)
            print("👋 Goodbye!\n")
            return 0


if __name__ == "__main__":
    sys.exit(main())
