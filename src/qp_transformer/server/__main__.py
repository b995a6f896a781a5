"""CLI entrypoint: python -m qp_transformer.server"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path

from qp_transformer.cache.config import CacheConfig
from qp_transformer.search.config import SearchConfig
from qp_transformer.server.config import ServerConfig


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="qp-transformer",
        description="Text to Wikidata Q/P sequences — REST server or one-shot transform",
    )
    p.add_argument("--mode", choices=["rest", "once", "sweep"], default="rest",
                   help="rest: serve the API; once: transform --text and print JSON; "
                        "sweep: remove expired cache entries (default: rest)")
    p.add_argument("--text", default="", help="Text to transform in 'once' mode")
    p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p.add_argument("--port", type=int, default=8430, help="Bind port (default: 8430)")

    # Transform options for 'once'
    p.add_argument("--max-candidates", type=int, default=3)
    p.add_argument("--max-ngram-size", type=int, default=3)
    p.add_argument("--search-limit", type=int, default=10)
    p.add_argument("--prefer-properties", action="store_true")
    p.add_argument("--include-labels", action="store_true")
    p.add_argument("--language", default="en")

    # Lookup backend
    p.add_argument("--api-url", default="https://www.wikidata.org/w/api.php",
                   help="Wikidata action API URL")
    p.add_argument("--lookup-timeout", type=float, default=10.0,
                   help="Per-span lookup timeout in seconds (default: 10)")
    p.add_argument("--coalesce", action="store_true",
                   help="Share one upstream call between concurrent identical lookups")

    # Cache
    p.add_argument("--cache", choices=["file", "structured", "disabled"], default="file",
                   help="Durable cache backend (default: file)")
    p.add_argument("--cache-dir", type=Path, default=Path("./data/wikidata-cache"))
    p.add_argument("--cache-db", type=Path, default=Path("./data/wikidata-cache.sqlite3"))
    p.add_argument("--cache-ttl", type=float, default=24 * 60 * 60,
                   help="Cache TTL in seconds (default: 86400)")

    # Logging
    p.add_argument("--log-level", default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        search=SearchConfig(
            base_url=args.api_url,
            lookup_timeout=args.lookup_timeout,
            coalesce_inflight=args.coalesce,
        ),
        cache=CacheConfig(
            backend=args.cache,
            cache_dir=args.cache_dir,
            db_path=args.cache_db,
            default_ttl_seconds=args.cache_ttl,
        ),
        log_level=args.log_level,
    )


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    config = build_config(args)

    if args.mode == "once":
        asyncio.run(_run_once(config, args))
    elif args.mode == "sweep":
        asyncio.run(_run_sweep(config))
    else:
        _run_rest(config)


def _run_rest(config: ServerConfig) -> None:
    import uvicorn

    from qp_transformer.server.rest.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port)


async def _run_once(config: ServerConfig, args: argparse.Namespace) -> None:
    from qp_transformer.server.dependencies import build_transformer

    transformer = build_transformer(config)
    try:
        result = await transformer.transform(args.text, {
            "max_candidates": args.max_candidates,
            "max_ngram_size": args.max_ngram_size,
            "search_limit": args.search_limit,
            "prefer_properties": args.prefer_properties,
            "include_labels": args.include_labels,
            "language": args.language,
        })
        print(json.dumps(result.as_dict(), indent=2, ensure_ascii=False))
    finally:
        await transformer.client.cache.close()
        await transformer.client.backend.aclose()


async def _run_sweep(config: ServerConfig) -> None:
    from qp_transformer.cache.factory import create_cache_from_config

    cache = create_cache_from_config(config.cache)
    try:
        removed = await cache.clean_expired()
        print(json.dumps({"removed": removed, "stats": await cache.get_stats()}, indent=2))
    finally:
        await cache.close()


if __name__ == "__main__":
    main()
