"""CLI entry point for Tiny-Memory-Graph."""

import argparse
import asyncio
import json
import sys
from collections import Counter

from tiny_memory_graph import Config, KnowledgeGraphManager, extract_locations
from tiny_memory_graph.config import resolve_memory_path
from tiny_memory_graph.logging_config import setup_logging


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Tiny-Memory-Graph: persistent knowledge graph with location extraction"
    )
    parser.add_argument(
        "-m", "--memory-file", help="Path to the memory file (default: MEMORY_FILE_PATH or memory.json)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the MCP tool server")
    serve_parser.add_argument("--host", help="Interface to bind (default: HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, help="Port to listen on (default: PORT or 8081)")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract locations from text")
    extract_parser.add_argument("text", help="Text to scan")
    extract_parser.add_argument(
        "--record", action="store_true", help="Store the locations in the memory file"
    )
    extract_parser.add_argument(
        "-s", "--source", help="Entity that mentions the locations (implies --record)"
    )

    # Stats command
    subparsers.add_parser("stats", help="Show graph statistics")

    # Search command
    search_parser = subparsers.add_parser("search", help="Search entities by substring")
    search_parser.add_argument("query", help="Case-insensitive search string")

    # Visualize command
    visualize_parser = subparsers.add_parser("visualize", help="Visualize knowledge graph")
    visualize_parser.add_argument(
        "-o", "--output", default="graph_viz.html", help="Output HTML file (default: graph_viz.html)"
    )
    visualize_parser.add_argument(
        "--filter-type", nargs="+", help="Filter by entity types (e.g., person location)"
    )
    visualize_parser.add_argument(
        "--max-nodes", type=int, default=200, help="Maximum nodes to display (default: 200)"
    )
    visualize_parser.add_argument(
        "--no-show", action="store_true", help="Do not open the result in a browser"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    config = Config.from_env()
    if args.memory_file:
        config.memory_file_path = str(resolve_memory_path(args.memory_file))
    setup_logging(config)

    try:
        if args.command == "serve":
            run_serve(args, config)
        elif args.command == "extract":
            run_extract(args, config)
        elif args.command == "stats":
            run_stats(config)
        elif args.command == "search":
            run_search(args, config)
        elif args.command == "visualize":
            run_visualize(args, config)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def run_serve(args, config):
    """Run the HTTP tool server."""
    from tiny_memory_graph.server import run_server

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    run_server(config)


def run_extract(args, config):
    """Print extracted locations, optionally storing them."""
    if not (args.record or args.source):
        for span in extract_locations(args.text):
            print(f"{span.start:>5}-{span.end:<5} {span.type:<9} {span.text}")
        return

    manager = KnowledgeGraphManager.from_config(config)
    created = asyncio.run(manager.extract_and_add_locations(args.text, args.source))
    print(json.dumps(created.to_dict(), indent=2, ensure_ascii=False))


def run_stats(config):
    """Show statistics for the stored graph."""
    manager = KnowledgeGraphManager.from_config(config)
    graph = asyncio.run(manager.read_graph())

    print(f"Graph Statistics ({config.memory_file_path}):")
    print(f"  Total entities: {len(graph.entities)}")
    print(f"  Total relations: {len(graph.relations)}")

    entity_types = Counter(e.entity_type for e in graph.entities)
    if entity_types:
        print("\n  Entity types:")
        for etype, count in sorted(entity_types.items()):
            print(f"    {etype}: {count}")

    relation_types = Counter(r.relation_type for r in graph.relations)
    if relation_types:
        print("\n  Relation types:")
        for rtype, count in sorted(relation_types.items()):
            print(f"    {rtype}: {count}")


def run_search(args, config):
    """Print entities matching a query."""
    manager = KnowledgeGraphManager.from_config(config)
    graph = asyncio.run(manager.search_nodes(args.query))
    print(json.dumps(graph.to_dict(), indent=2, ensure_ascii=False))


def run_visualize(args, config):
    """Visualize the stored knowledge graph."""
    from tiny_memory_graph.visualization import PyVisVisualizer

    manager = KnowledgeGraphManager.from_config(config)
    graph = asyncio.run(manager.read_graph())
    print(f"Graph loaded: {len(graph.entities)} entities, {len(graph.relations)} relations")

    viz = PyVisVisualizer(
        graph=graph,
        filter_types=args.filter_type,
        max_nodes=args.max_nodes,
    )
    print("Generating visualization...")
    viz.generate()
    viz.save(args.output)

    if not args.no_show:
        viz.show()


if __name__ == "__main__":
    main()
