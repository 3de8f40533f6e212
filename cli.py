"""
Command-line interface for the cleanview dashboard client.
Lists and uploads datasets, previews cleaning operations, saves them and trains models.
"""

import argparse
import sys
import json
import logging
from typing import List, Optional
import asyncio

from cleanview.api_client import BackendClient
from cleanview.config import ClientConfig
from cleanview.errors import CleanviewError
from cleanview.identity import FileIdentityProvider
from cleanview.models import AnalysisSnapshot, quality_stats
from cleanview.operation_engine import IMPUTATION_METHODS
from cleanview.session import CleaningSession, TrainingSession
from cleanview.training import TrainingRequest, build_hyperparameters, known_algorithms

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

def dataset_id(value: str):
    """Numeric ids are sent as integers, anything else as-is."""
    return int(value) if value.isdigit() else value


def setup_common_parser() -> argparse.ArgumentParser:
    """Options shared by every command."""
    parser = argparse.ArgumentParser(add_help=False)

    parser.add_argument(
        '--api-url',
        help='Backend API base URL (default: $CLEANVIEW_API_URL or http://localhost:8000/api)'
    )

    parser.add_argument(
        '--identity-file',
        help='File holding the client user id (default: ~/.cleanview/user_id)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=30.0,
        help='Request timeout in seconds (default: 30)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser


def setup_preview_parser() -> argparse.ArgumentParser:
    """Setup argument parser for the preview command."""
    parser = argparse.ArgumentParser(
        description='Analyze a dataset and preview cleaning operations locally',
        prog='preview'
    )

    parser.add_argument(
        '--dataset', '-d',
        required=True,
        type=dataset_id,
        help='Dataset id to analyze'
    )

    parser.add_argument(
        '--op', '-o',
        action='append',
        default=[],
        choices=['replace_nulls', 'impute', 'normalize', 'encode'],
        help='Operation to apply to the preview, in order (repeatable)'
    )

    parser.add_argument(
        '--method',
        choices=list(IMPUTATION_METHODS),
        default='mean',
        help='Imputation method for --op impute (default: mean)'
    )

    parser.add_argument(
        '--page', '-p',
        type=int,
        default=1,
        help='Preview page to display (default: 1)'
    )

    parser.add_argument(
        '--save',
        action='store_true',
        help='Persist the operations on the backend and show the re-analyzed dataset'
    )

    return parser


def setup_train_parser() -> argparse.ArgumentParser:
    """Setup argument parser for the train command."""
    parser = argparse.ArgumentParser(
        description='Train a model on a cleaned dataset',
        prog='train'
    )

    parser.add_argument('--dataset', '-d', required=True, type=dataset_id, help='Cleaned dataset id')
    parser.add_argument('--name', '-n', required=True, help='Model name')
    parser.add_argument('--target', '-t', required=True, help='Target variable')
    parser.add_argument(
        '--features', '-f',
        nargs='+',
        required=True,
        help='Feature columns'
    )
    parser.add_argument(
        '--algorithm', '-a',
        choices=known_algorithms(),
        default='random_forest',
        help='Algorithm (default: random_forest)'
    )
    parser.add_argument('--epochs', type=int, default=100, help='Epochs for neural algorithms')
    parser.add_argument('--batch-size', type=int, default=32, help='Batch size for neural algorithms')
    parser.add_argument('--learning-rate', type=float, default=0.001, help='Learning rate for neural algorithms')
    parser.add_argument('--test-size', type=float, default=0.2, help='Test split (default: 0.2)')

    return parser


def build_client(args) -> BackendClient:
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    config = ClientConfig.from_env(api_url=args.api_url, identity_path=args.identity_file, timeout=args.timeout)
    return BackendClient(config, FileIdentityProvider(config.identity_path))


def print_snapshot(session: CleaningSession) -> None:
    snapshot: Optional[AnalysisSnapshot] = session.preview
    if snapshot is None:
        return
    stats = quality_stats(snapshot)
    print(f"Dataset {snapshot.dataset_id}: {stats.total_records} records, "
          f"{stats.total_nulls} nulls, quality {stats.quality_percent}%")
    print(f"Page {session.current_page}/{session.page_count()}")
    print(snapshot.to_frame(tuple(session.current_rows())).to_string(index=False))


def report_notifications(session) -> int:
    """Log session notifications; return 1 if any was an error."""
    failed = 0
    for notification in session.notifications:
        if notification.is_error:
            logger.error(f"{notification.title}: {notification.description}")
            failed = 1
        else:
            logger.info(f"{notification.title}: {notification.description}")
    return failed


async def datasets_command(args) -> int:
    """Execute datasets command."""
    client = build_client(args)
    try:
        datasets = await client.list_datasets()
    except CleanviewError as e:
        logger.error(f"Could not list datasets: {e}")
        return 1

    for dataset in datasets:
        print(f"{dataset.id}\t{dataset.name}\t{dataset.num_rows} rows\t{dataset.num_columns} columns")
    return 0


async def upload_command(args) -> int:
    """Execute upload command."""
    session = CleaningSession(build_client(args))
    await session.upload(args.file)
    return report_notifications(session)


async def preview_command(args) -> int:
    """Execute preview command."""
    session = CleaningSession(build_client(args))
    snapshot = await session.select_dataset(args.dataset)
    if snapshot is None:
        return report_notifications(session) or 1

    for op in args.op:
        options = {'method': args.method} if op == 'impute' else None
        operation = session.apply(op, options)
        logger.info(f"Queued: {operation.label}")

    session.set_page(args.page)
    print_snapshot(session)

    if args.save and session.pending_operations:
        await session.save()
        print_snapshot(session)
    return report_notifications(session)


async def train_command(args) -> int:
    """Execute train command."""
    session = TrainingSession(build_client(args))
    request = TrainingRequest(
        dataset_id=args.dataset,
        name=args.name,
        algorithm=args.algorithm,
        target_variable=args.target,
        features=args.features,
        hyperparameters=build_hyperparameters(args.algorithm, args.epochs, args.batch_size, args.learning_rate),
        test_size=args.test_size,
    )
    data = await session.train(request)
    if data is not None:
        print(json.dumps(data.get('metrics', {}), indent=2))
    return report_notifications(session)


async def models_command(args) -> int:
    """Execute models command."""
    client = build_client(args)
    try:
        models = await client.list_models()
    except CleanviewError as e:
        logger.error(f"Could not list models: {e}")
        return 1

    for model in models:
        accuracy = f"{model.accuracy * 100:.2f}%" if model.accuracy is not None else "-"
        print(f"{model.id}\t{model.name}\t{model.algorithm or '-'}\t{accuracy}\t{model.status or '-'}")
    return 0


async def health_command(args) -> int:
    """Execute health command."""
    client = build_client(args)
    try:
        status = await client.check_health()
    except CleanviewError as e:
        logger.error(f"Backend unavailable: {e}")
        return 1
    print(json.dumps(status, indent=2))
    return 0


def reset_user_command(args) -> int:
    config = ClientConfig.from_env(api_url=args.api_url, identity_path=args.identity_file)
    FileIdentityProvider(config.identity_path).reset()
    logger.info(f"Removed user id at {config.identity_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='cleanview dashboard client',
        prog='cleanview'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    common = setup_common_parser()

    subparsers.add_parser('datasets', parents=[common], help='List uploaded datasets')
    upload_parser = subparsers.add_parser('upload', parents=[common], help='Upload a CSV or Excel file')
    upload_parser.add_argument('file', help='File to upload')
    subparsers.add_parser('preview', parents=[common, setup_preview_parser()], add_help=False)
    subparsers.add_parser('train', parents=[common, setup_train_parser()], add_help=False)
    subparsers.add_parser('models', parents=[common], help='List trained models')
    subparsers.add_parser('health', parents=[common], help='Check backend status')
    subparsers.add_parser('reset-user', parents=[common], help='Forget the stored user id')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        'datasets': datasets_command,
        'upload': upload_command,
        'preview': preview_command,
        'train': train_command,
        'models': models_command,
        'health': health_command,
    }

    if args.command == 'reset-user':
        return reset_user_command(args)
    elif args.command in commands:
        return asyncio.run(commands[args.command](args))
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
