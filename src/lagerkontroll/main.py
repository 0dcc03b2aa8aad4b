#!/usr/bin/env python3
"""
Lagerkontroll - Stock-Count Console Entry Point

Initializes the session engine and runs a line-based console front end.

Components Initialized:
- Scanner hardware factory (OpenCV or development stubs)
- Count round use case (session, warehouse source, CSV export sink)
- Command handler (operator commands)

Usage:
    lagerkontroll [--dev] [--warehouses PATH] [--export-dir DIR]
                  [--camera-index N] [--log-level LEVEL]

Arguments:
    --dev: Use stub camera and barcode detector
    --warehouses: Warehouse list JSON (default: data/lagre.json)
    --export-dir: Directory for exported CSV files (default: exports)
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .application.handlers.command_handler import CommandHandler
from .application.use_cases.count_round import CountRoundUseCase
from .config import AppConfig, LoggingConfig
from .domain.errors import WarehouseLoadError
from .infrastructure.hardware.factory import ScannerHardwareFactory
from .infrastructure.storage.csv_export_sink import FileExportSink
from .infrastructure.storage.warehouse_repository import JsonWarehouseRepository

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"quit", "exit", "q"}
YES_ANSWERS = {"j", "ja", "y", "yes"}


def configure_logging(config: LoggingConfig) -> None:
    """Install stdout and file handlers on the root logger"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.log_file is not None:
        handlers.append(logging.FileHandler(config.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, config.level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


async def ask_confirmation(question: str) -> bool:
    """Read a yes/no answer in the executor so scan polling keeps running"""
    loop = asyncio.get_event_loop()
    try:
        answer = await loop.run_in_executor(None, input, f"{question} [j/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in YES_ANSWERS


class LagerkontrollApp:
    """Wires the engine together and runs the console loop"""

    def __init__(self, config: AppConfig):
        self.config = config
        self.running = False

        self.hardware_factory = ScannerHardwareFactory(config.scan, development_mode=config.development_mode)
        self.use_case = CountRoundUseCase(
            warehouse_repository=JsonWarehouseRepository(config.storage.warehouses_path),
            export_sink=FileExportSink(config.storage.export_directory),
            scan_controller=self.hardware_factory.create_scan_controller(),
        )
        self.command_handler = CommandHandler(self.use_case, confirm=ask_confirmation)

        logger.info(f"Lagerkontroll initialized (dev_mode={config.development_mode})")

    async def initialize(self) -> None:
        try:
            warehouses = await self.use_case.load_warehouses()
        except WarehouseLoadError as e:
            logger.error(f"Warehouse list unavailable: {e}")
            print(e.user_message)
            return

        session = self.use_case.session
        print(f"Dato: {session.iso_date}  Uke: {session.week_number}")
        for warehouse in warehouses:
            print(f"  {warehouse.id}: {warehouse.name}")

    async def run(self) -> None:
        await self.initialize()
        self.running = True
        print("Skriv 'help' for kommandoer.")

        loop = asyncio.get_event_loop()
        while self.running:
            try:
                line = await loop.run_in_executor(None, input, "> ")
            except EOFError:
                break

            if not line.strip():
                continue
            if line.strip().lower() in QUIT_COMMANDS:
                break

            response = await self.command_handler.handle_line(line)
            if response.message:
                print(response.message)

        await self.shutdown()

    async def shutdown(self) -> None:
        self.running = False
        self.use_case.cancel_scan()
        logger.info("Lagerkontroll stopped")


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lagerkontroll stock-count session tool")
    parser.add_argument("--dev", action="store_true", help="Use stub scanner hardware")
    parser.add_argument("--warehouses", type=Path, help="Warehouse list JSON file")
    parser.add_argument("--export-dir", type=Path, help="Directory for exported CSV files")
    parser.add_argument("--camera-index", type=int, help="OpenCV camera index")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AppConfig:
    return AppConfig.default().with_overrides(
        warehouses_path=args.warehouses,
        export_directory=args.export_dir,
        camera_index=args.camera_index,
        log_level=args.log_level,
        development_mode=args.dev or None,
    )


def main(argv: Optional[list] = None) -> int:
    config = build_config(parse_arguments(argv))
    configure_logging(config.logging)

    app = LagerkontrollApp(config)
    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:
        print("\nAvsluttet")
    return 0


if __name__ == "__main__":
    sys.exit(main())
