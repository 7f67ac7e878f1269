"""scrapu CLI"""

import argparse
import asyncio
import json
import sys

from common.config import load_config
from common.logging import setup_logging_from_config
from scrapu import __version__
from scrapu.services import close_services, open_services
from scraper.exception import ScraperError
from storage.exception import NotFoundError


def parse_selectors(values: list[str]) -> dict[str, str]:
    """field=css 형식의 인자를 dict로 변환"""
    selectors = {}
    for value in values:
        field, sep, css = value.partition("=")
        if not sep or not field.strip() or not css.strip():
            raise argparse.ArgumentTypeError(f"Invalid selector '{value}' (expected field=css)")
        selectors[field.strip()] = css.strip()
    return selectors


async def run_job(job_id: int) -> int:
    """잡 1회 실행 (스케줄 타이머는 등록하지 않음)"""
    config = load_config()
    services = await open_services(config, start_scheduler=False)
    try:
        summary = await services.runner.run(job_id)
    except NotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await close_services(services)

    print(f"Saved {summary.saved}/{len(summary.urls)} pages")
    for url in summary.failed_urls:
        print(f"  failed: {url}")
    return 0 if not summary.failed else 2


async def test_job(url: str, selectors: dict[str, str], method: str | None, delay: int | None) -> int:
    """저장하지 않고 1페이지 수집 결과 출력"""
    config = load_config()
    services = await open_services(config, start_scheduler=False)
    try:
        data = await services.runner.test_run(
            {"url": url, "selectors": selectors, "method": method, "delay": delay}
        )
    except ScraperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await close_services(services)

    print(json.dumps(data, ensure_ascii=False, indent=2))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="scrapu",
        description="scrapu - 스케줄 기반 웹 스크래퍼"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # run command
    run_parser = subparsers.add_parser("run", help="Run a stored job once")
    run_parser.add_argument("job_id", type=int, help="Job ID")

    # test command
    test_parser = subparsers.add_parser("test", help="Scrape one page without saving")
    test_parser.add_argument("--url", required=True, help="Target URL")
    test_parser.add_argument(
        "-s", "--selector",
        action="append",
        default=[],
        help="Field selector as field=css (repeatable)"
    )
    test_parser.add_argument("--method", choices=["browser", "http"], default=None)
    test_parser.add_argument("--delay", type=int, default=None, help="Seconds to wait after page load")

    # serve command
    subparsers.add_parser("serve", help="Run scheduler and admin API")

    # version
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()

    config = load_config()
    setup_logging_from_config(config)

    if args.command == "run":
        sys.exit(asyncio.run(run_job(args.job_id)))
    elif args.command == "test":
        try:
            selectors = parse_selectors(args.selector)
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))
        sys.exit(asyncio.run(test_job(args.url, selectors, args.method, args.delay)))
    elif args.command == "serve":
        from main import main as serve
        try:
            asyncio.run(serve())
        except KeyboardInterrupt:
            pass
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
