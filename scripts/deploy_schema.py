#!/usr/bin/env python
# ============================================================================
# SCHEMA DEPLOYMENT SCRIPT
# ============================================================================
# EPOCH: 1 - OBJECT DERIVATION
# PURPOSE: Render or apply the schema for every class in an object manifest
# USAGE:
#   python scripts/deploy_schema.py --manifest objects.yaml --dry-run   # Preview SQL
#   python scripts/deploy_schema.py --manifest objects.yaml             # Execute deployment
#   python scripts/deploy_schema.py --manifest objects.yaml --status    # Versions and order
#   python scripts/deploy_schema.py --manifest objects.yaml --surfaces  # Tool/endpoint manifest
# ============================================================================

import sys
import os
import argparse
import asyncio

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import get_defaults
from core.errors import ObjectForgeError
from core.logging import configure_logging
from core.schema import SchemaManager, SchemaToSQL
from manifest import ManifestGenerator
from registry import ObjectRegistry
from repositories.database import DatabasePool, PostgresExecutor


def _print_status(registry: ObjectRegistry) -> None:
    print("\n[STATUS]\n")
    for class_name in registry.get_initialization_order(allow_cycles=True):
        schema = registry.get_schema(class_name)
        deps = ", ".join(schema.dependencies) or "-"
        print(f"  {schema.table_name:<30} v{schema.version}  {len(schema.columns)} columns  deps: {deps}")


async def _deploy(registry: ObjectRegistry, args) -> int:
    async with DatabasePool(min_size=1, max_size=2, connection_string=args.connection) as pool:
        manager = SchemaManager(
            registry,
            PostgresExecutor(pool),
            dialect="postgres",
            schema_name=args.schema,
            include_comments=args.comments,
        )
        result = await manager.initialize_all(force=args.force)

    print("\n[RESULTS]\n")
    for class_name in result.initialized:
        print(f"  initialized  {class_name}")
    for class_name in result.skipped:
        print(f"  skipped      {class_name}")
    for error in result.errors:
        print(f"  FAILED       {error['schema']}: {error['error']}")

    print("\n" + "=" * 70)
    if result.success:
        print(f"Deployment completed in {result.execution_time:.2f}s")
        return 0
    print(f"Deployment failed: {len(result.errors)} error(s)")
    return 1


def main():
    defaults = get_defaults()
    parser = argparse.ArgumentParser(
        description="Render or deploy the schema derived from an object manifest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  objectforge-schema --manifest objects.yaml --dry-run            # Preview DDL (sqlite)
  objectforge-schema --manifest objects.yaml --dry-run --dialect postgres
  objectforge-schema --manifest objects.yaml                      # Deploy to PostgreSQL
  objectforge-schema --manifest objects.yaml --surfaces           # Tool/endpoint manifest

Environment Variables:
  OBJECTFORGE_MANIFEST  Manifest path (default for --manifest)
  OBJECTFORGE_SQL_DIALECT  Dialect for --dry-run (default: sqlite)
  OBJECTFORGE_DB_SCHEMA    Schema qualifier for postgres DDL
  DATABASE_URL          Full PostgreSQL connection string
  POSTGRES_HOST         Database host (default: localhost)
  POSTGRES_DB           Database name (default: postgres)
  POSTGRES_USER         Database user (default: postgres)
  POSTGRES_PASSWORD     Database password
  POSTGRES_PORT         Database port (default: 5432)
  POSTGRES_SSLMODE      SSL mode (default: prefer)
        """
    )
    parser.add_argument(
        "--manifest",
        type=str,
        default=defaults.manifest.manifest_path,
        help="Object-definition manifest (.json, .yaml, .yml)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print DDL without executing"
    )
    parser.add_argument(
        "--dialect",
        choices=["sqlite", "postgres"],
        default=defaults.schema.dialect,
        help="DDL dialect for --dry-run (deployment always uses postgres)"
    )
    parser.add_argument(
        "--schema",
        type=str,
        default=defaults.schema.schema_name,
        help="PostgreSQL schema qualifier"
    )
    parser.add_argument(
        "--comments",
        action="store_true",
        default=defaults.schema.include_comments,
        help="Emit COMMENT ON statements (postgres)"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Drop and recreate every table"
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show table versions and initialization order"
    )
    parser.add_argument(
        "--surfaces",
        action="store_true",
        help="Print the generated tool/endpoint manifest as JSON"
    )
    parser.add_argument(
        "--connection",
        type=str,
        help="PostgreSQL connection string (overrides environment)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args()

    configure_logging(level="DEBUG" if args.verbose else "WARNING")

    if not args.manifest:
        parser.error("--manifest is required (or set OBJECTFORGE_MANIFEST)")

    try:
        registry = ObjectRegistry.from_file(args.manifest, seal=True)

        if args.surfaces:
            print(ManifestGenerator(registry).to_json())
            return

        if args.dry_run:
            renderer = SchemaToSQL(
                dialect=args.dialect,
                schema_name=args.schema,
                include_comments=args.comments,
            )
            order = registry.get_initialization_order(allow_cycles=True)
            print(renderer.render_many(registry.get_schema(name) for name in order))
            return

        print("=" * 70)
        print("OBJECTFORGE - Schema Deployment")
        print("=" * 70)
        print(f"Manifest: {args.manifest}")
        print(f"Classes: {len(registry)}")
        print("=" * 70)

        if args.status:
            _print_status(registry)
            print("\n" + "=" * 70)
            return

        sys.exit(asyncio.run(_deploy(registry, args)))

    except ObjectForgeError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
