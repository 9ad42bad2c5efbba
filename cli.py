import argparse
import asyncio
import json

from analytics_service import AnalyticsOrchestrator
from config import load_analytics_settings
from db import AsyncRecordStore
from logging_config import configure_logging
from seed_sample_data import seed


def _orchestrator(db_path: str, yaml_path: str | None) -> AnalyticsOrchestrator:
    settings = load_analytics_settings(yaml_path)
    return AnalyticsOrchestrator(AsyncRecordStore(db_path), settings)


def show_analytics(db_path: str, yaml_path: str | None, timeframe: int) -> dict:
    orchestrator = _orchestrator(db_path, yaml_path)
    result = asyncio.run(orchestrator.get_comprehensive_analytics(timeframe))
    print(json.dumps(result, indent=2))
    return result


def show_progression(
    db_path: str, yaml_path: str | None, exercise_id: int, timeframe: int
) -> dict:
    orchestrator = _orchestrator(db_path, yaml_path)
    result = asyncio.run(orchestrator.progression.analyze(exercise_id, timeframe))
    print(json.dumps(result, indent=2))
    return result


def serve(db_path: str, yaml_path: str | None, host: str, port: int) -> None:
    import uvicorn

    from rest_api import AnalyticsAPI

    api = AnalyticsAPI(db_path=db_path, yaml_path=yaml_path)
    uvicorn.run(api.app, host=host, port=port)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Workout analytics commands")
    parser.add_argument("--db", default="workout.db")
    parser.add_argument("--yaml", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    dash = sub.add_parser("analytics")
    dash.add_argument("--timeframe", type=int, default=30)

    prog = sub.add_parser("progression")
    prog.add_argument("--exercise", type=int, required=True)
    prog.add_argument("--timeframe", type=int, default=90)

    demo = sub.add_parser("demo")
    demo.add_argument("--weeks", type=int, default=6)

    srv = sub.add_parser("serve")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    configure_logging()

    if args.cmd == "analytics":
        show_analytics(args.db, args.yaml, args.timeframe)
    elif args.cmd == "progression":
        show_progression(args.db, args.yaml, args.exercise, args.timeframe)
    elif args.cmd == "demo":
        seed(args.db, args.weeks)
    elif args.cmd == "serve":
        serve(args.db, args.yaml, args.host, args.port)


if __name__ == "__main__":
    main()
