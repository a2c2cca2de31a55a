"""Departure operations CLI.

Usage:
    python cli.py operations seed --catalog data/catalog.yml
    python cli.py operations list --role administrator
    python cli.py operations show ops-pkg-1 grp-3f2a9c81d0e4
    python cli.py operations validate ops-pkg-1 grp-3f2a9c81d0e4
    python cli.py operations milestone ops-pkg-1 grp-3f2a9c81d0e4 air_deposit \\
        --total 1200000 --percentage 30
    python cli.py operations notes ops-pkg-1 "Visa run on the 5th"
"""
import argparse
import logging
import sys
from datetime import date
from typing import Optional

from .catalog import CatalogSource, InMemoryCatalog, load_catalog
from .config import get_config, reload_config
from .dashboard import list_departures
from .detail import build_group_detail
from .errors import OperationsError
from .service import OperationsService, UpdateResult
from .storage import JSONFileProjectRepository, create_repository
from .temporal import as_calendar_date

logger = logging.getLogger(__name__)


def _build(args):
    cfg = reload_config(args.config) if args.config else get_config()
    if args.store:
        repository = JSONFileProjectRepository(args.store)
    else:
        repository = create_repository(cfg)
    logger.debug(f"Storage: {repository.__class__.__name__}")
    catalog = _catalog(args.catalog or cfg.catalog_path)
    return cfg, OperationsService(repository, cfg.default_land_currency, catalog), catalog


def _catalog(path: Optional[str]) -> CatalogSource:
    return load_catalog(path) if path else InMemoryCatalog()


def _today(value: Optional[str]) -> date:
    return as_calendar_date(value) if value else date.today()


def _report(result: UpdateResult) -> int:
    if not result.ok:
        print(f"❌ {result.error}")
        return 1
    print(f"✅ {result.project.id}/{result.group.id} updated")
    return 0


def cmd_seed(args, cfg, service, catalog) -> int:
    packages = catalog.list_packages()
    for package in packages:
        project = service.create_project(package)
        print(f"  {project.id:24} {len(project.groups)} groups  {package.product_name}")
    print(f"✅ {len(packages)} packages")
    return 0


def cmd_list(args, cfg, service, catalog) -> int:
    rows = list(list_departures(service.list_projects(), catalog.list_packages(),
                                args.role, _today(args.today), cfg))
    if not rows:
        print("No departures.")
        return 0
    for row in rows:
        badge = row.countdown.label if row.countdown else "-"
        status = "✓" if row.group.is_validated else "…"
        print(f"  {badge:>6} {status} {str(row.group.departure_date or '-'):<10} "
              f"{row.package.product_name[:30]:<30} {row.project_id}/{row.group.id}")
    return 0


def cmd_show(args, cfg, service, catalog) -> int:
    project = service.get_project(args.project_id)
    group = project.group(args.group_id) if project else None
    if group is None:
        print(f"❌ Unknown group {args.project_id}/{args.group_id}")
        return 1
    package = catalog.get_package(project.package_id)
    if package is None:
        print(f"❌ Package {project.package_id} not in catalog")
        return 1

    detail = build_group_detail(project, group, package, catalog.bookings_for(package.id),
                                _today(args.today), cfg)
    print(f"\n{package.product_name}  {group.departure_date or '-'}  [{group.status.value}]")
    print("\nChecklist:")
    for item in detail.checklist:
        print(f"  {item.classification.label:>10}  {item.label:<30} {str(item.deadline or '-')}")
    print("\nPayments:")
    for line in detail.milestones:
        m = line.milestone
        amount = f"{m.amount_to_pay:,.2f}" if m.amount_to_pay is not None else "-"
        print(f"  {line.key.value:<13} {amount:>15} {line.currency.value}  {m.status.value}")
    print(f"\nManifest: {detail.manifest.passenger_count} passengers, "
          f"{detail.manifest.total_rooms} rooms")
    return 0


def cmd_validate(args, cfg, service, catalog) -> int:
    return _report(service.validate_group(args.project_id, args.group_id, _today(args.today)))


def cmd_notes(args, cfg, service, catalog) -> int:
    result = service.update_notes(args.project_id, args.text)
    if not result.ok:
        print(f"❌ {result.error}")
        return 1
    print(f"✅ {result.project.id} notes updated")
    return 0


def cmd_milestone(args, cfg, service, catalog) -> int:
    patch = {}
    if args.deadline is not None:
        patch["deadline"] = args.deadline
    if args.total is not None:
        patch["total_amount"] = args.total
    if args.percentage is not None:
        patch["percentage"] = args.percentage
    if args.amount is not None:
        patch["amount_to_pay"] = args.amount
    if args.paid:
        patch["status"] = "paid"
    if args.receipt is not None:
        patch["receipt_url"] = args.receipt
    return _report(service.update_milestone(args.project_id, args.group_id, args.key, patch))


COMMANDS = {
    'seed': cmd_seed,
    'list': cmd_list,
    'show': cmd_show,
    'validate': cmd_validate,
    'milestone': cmd_milestone,
    'notes': cmd_notes,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Departure Operations')
    parser.add_argument('--config', help='Config YAML (default: OPS_CONFIG_PATH)')
    parser.add_argument('--catalog', help='Catalog YAML with packages and bookings')
    parser.add_argument('--store', help='JSON store file (overrides storage.backend)')
    parser.add_argument('--today', help='Reference date (YYYY-MM-DD)')
    parser.add_argument('-v', '--verbose', action='store_true')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('seed', help='Create operations projects for all catalog packages')

    p = sub.add_parser('list', help='Departure worklist')
    p.add_argument('--role', default='administrator')

    for name, text in (('show', 'Group detail'), ('validate', 'Validate a departure group')):
        p = sub.add_parser(name, help=text)
        p.add_argument('project_id')
        p.add_argument('group_id')

    p = sub.add_parser('milestone', help='Edit a payment milestone')
    p.add_argument('project_id')
    p.add_argument('group_id')
    p.add_argument('key', help='air_deposit | air_balance | land_deposit | land_balance')
    p.add_argument('--deadline')
    p.add_argument('--total', type=float)
    p.add_argument('--percentage', type=float)
    p.add_argument('--amount', type=float, help='Amount to pay (overrides total x percentage)')
    p.add_argument('--paid', action='store_true')
    p.add_argument('--receipt')

    p = sub.add_parser('notes', help='Set the notes of an operations project')
    p.add_argument('project_id')
    p.add_argument('text')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        cfg, service, catalog = _build(args)
        return COMMANDS[args.command](args, cfg, service, catalog)
    except OperationsError as e:
        print(f"❌ {e}")
        return 2


if __name__ == '__main__':
    sys.exit(main())
