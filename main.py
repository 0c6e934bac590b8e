#!/usr/bin/env python3
"""
Supplement Stack Analyzer - Evidence and safety analysis for supplement stacks
"""

import argparse
import sys

from catalog_loader import CatalogClient, is_remote, load_catalog
from category_coverage import sort_by_rating
from config import get_settings
from dosage import FOOD_OPTIONS, TIMING_OPTIONS, build_schedule, generate_dosage_summary, option_label
from logger_config import setup_logging
from models import Selection
from stack_analyzer import AnalysisReport, StackAnalyzer
from stack_store import JsonFileStore, StackLibrary
from stack_warnings import WarningsReport, generate_warnings_summary


def print_report(report: AnalysisReport, selection: Selection = None, catalog=None):
    """Print formatted stack analysis."""

    print("\n" + "="*60)
    print("💊 STACK ANALYSIS RESULTS")
    print("="*60)

    if report.is_empty:
        print("\n   Nothing selected. Add items to analyze a stack.")
        print("\n" + "="*60)
        return

    # Evidence
    evidence = report.evidence
    print(f"\n🔬 EVIDENCE")
    print(f"   Average score: {evidence.avg_score} ({evidence.tier_info.tier} - {evidence.tier_info.label})")
    print(f"   Tiers: " + "  ".join(f"{tier}:{count}" for tier, count in evidence.tier_counts.items()))
    print(f"   Studies: {evidence.totals['total_studies']} total, {evidence.totals['rcts']} RCTs, "
          f"{evidence.totals['meta_analyses']} meta-analyses")
    print(f"   Strongest: " + ", ".join(f"{e.name} ({e.score})" for e in evidence.strongest))
    print(f"   Weakest: " + ", ".join(f"{e.name} ({e.score})" for e in evidence.weakest))

    # Coverage
    print(f"\n📊 CATEGORY COVERAGE")
    for entry in sort_by_rating(report.category_coverage):
        bar = "█" * entry.rating + "░" * (entry.max_rating - entry.rating)
        print(f"   {entry.category.name:<24} {bar} {entry.rating}/{entry.max_rating}  ({', '.join(entry.item_names)})")

    # Synergies
    print(f"\n🔗 SYNERGIES ({len(report.synergies)})")
    if report.synergies:
        for match in report.synergies:
            print(f"   {match.name} [{match.strength}, {match.evidence_level} evidence]")
            print(f"      {' + '.join(match.item_names)}")
    else:
        print("   No documented synergies in this stack")

    # Interactions
    print(f"\n⚠️  INTERACTIONS ({len(report.interactions)})")
    if report.interactions:
        for record in report.interactions:
            print(f"   [{record.severity}] {record.from_name} × {record.to_name}: {record.effect}")
    else:
        print("   No known interactions between selected items")

    # Warnings
    warnings = WarningsReport(items=report.warnings)
    severe = warnings.get_severe()
    print(f"\n🚨 WARNINGS" + (f" ({len(severe)} severe)" if severe else ""))
    for line in generate_warnings_summary(warnings).splitlines():
        print(f"   {line}" if line else "")

    # Benefits / side effects
    print(f"\n✅ BENEFITS ({len(report.benefits)})")
    for entry in report.benefits:
        print(f"   - {entry.text} ({', '.join(entry.sources)})")

    print(f"\n➖ SIDE EFFECTS ({len(report.side_effects)})")
    for entry in report.side_effects:
        print(f"   - {entry.text} ({', '.join(entry.sources)})")

    # Dosage schedule
    if selection is not None and catalog is not None:
        schedule = build_schedule(generate_dosage_summary(selection, catalog))
        print(f"\n📋 DAILY SCHEDULE")
        for timing, lines in schedule.blocks:
            print(f"   {option_label(TIMING_OPTIONS, timing)}:")
            for line in lines:
                food = option_label(FOOD_OPTIONS, line.config.with_food) if line.config.with_food else ""
                print(f"      {line.name}: {line.display_dose}" + (f" ({food})" if food else ""))
        if schedule.unscheduled:
            print("   Not scheduled: " + ", ".join(f"{line.name} ({line.standard})" for line in schedule.unscheduled))

    print("\n" + "="*60)


def main():
    """Main entry point for the stack analyzer."""

    parser = argparse.ArgumentParser(
        description="Analyze a supplement stack",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py nac glycine magnesium
  python main.py --list-items --sort alpha
  python main.py elvanse l-tyrosine --save "Focus stack"
  python main.py --load custom-1718000000000

Settings can be overridden with STACK_* environment variables or a .env file.
        """
    )

    parser.add_argument('items', nargs='*', help='Catalog ids of the items to analyze')
    parser.add_argument('--catalog', help='Catalog directory or base URL')
    parser.add_argument('--load', metavar='STACK_ID', help='Analyze a saved stack')
    parser.add_argument('--save', metavar='NAME', help='Save the selection under a name')
    parser.add_argument('--list-items', action='store_true', help='List catalog items by category')
    parser.add_argument('--list-stacks', action='store_true', help='List saved stacks')
    parser.add_argument('--sort', choices=['evidence', 'alpha'], default='evidence',
                        help='Item order for --list-items')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging and tracebacks')

    args = parser.parse_args()

    settings = get_settings()
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        source = args.catalog or settings.catalog_source
        client = None
        if is_remote(source):
            client = CatalogClient(source, timeout=settings.request_timeout, max_retries=settings.max_retries)
        catalog = load_catalog(source, client)
        library = StackLibrary(JsonFileStore(settings.stacks_file))

        if args.list_items:
            for category, _ in catalog.grouped_by_category():
                print(f"\n{category.icon} {category.name}")
                for item in catalog.items_in_category(category.id, sort=args.sort):
                    print(f"   {item.id:<24} {item.name}")
            return

        if args.list_stacks:
            stacks = library.list_stacks()
            if not stacks:
                print("No saved stacks.")
            for stack in stacks:
                print(f"   {stack.id:<22} {stack.name} ({len(stack.item_ids)} items)")
            return

        if args.load:
            selection = library.load_stack(args.load, catalog)
            if selection is None:
                print(f"Error: Saved stack '{args.load}' not found.")
                sys.exit(1)
            for item_id in args.items:
                selection.add(item_id)
        else:
            selection = Selection.from_ids(args.items)

        unknown = [item_id for item_id in selection.ids if item_id not in catalog]
        if unknown:
            print(f"Ignoring unknown item ids: {', '.join(unknown)}")
            for item_id in unknown:
                selection.remove(item_id)

        report = StackAnalyzer(catalog).analyze(selection)
        print_report(report, selection, catalog)

        if args.save:
            saved = library.save_stack(args.save, selection, stack_id=args.load)
            if saved:
                print(f"💾 Saved stack '{saved.name}' as {saved.id}")
            else:
                print("Nothing to save: the selection is empty.")

    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
