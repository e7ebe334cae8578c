# main.py
# CLI entry point

import argparse
import json
import logging
import sys

from browser.playwright_browser import PlaywrightBrowser
from config import load_config
from controller import Controller
from errors import EngineError
from handlers.common import ExecutionContext
from planner import Planner
from suite import TestCase, run_test_suite
from vlm.semantic_resolver import VisionResolver


def setup_logging(log_dir):
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_dir / "stepstream.log"),
        ],
    )


def main():
    parser = argparse.ArgumentParser(description="Run a natural-language browser goal as an instruction stream")
    parser.add_argument("intent", nargs="?", help="Goal, e.g. 'open https://example.com, click Login'")
    parser.add_argument("--cases", help="JSON file with a list of test cases to run instead of a single goal")
    parser.add_argument("--page-url", help="Page every test case starts from")
    parser.add_argument("--priority", action="append", help="Only run cases with this priority (repeatable)")
    parser.add_argument("--env-file", help="dotenv file to load (default: .env)")
    parser.add_argument("--headless", action="store_true", help="Run browser in headless mode")
    parser.add_argument("--no-cache", action="store_true", help="Always plan, never read or write the cache")
    parser.add_argument("--continue-on-error", action="store_true", help="Keep going after a failed step")
    parser.add_argument("--step-delay", type=int, default=None, help="Pause between steps in ms")

    args = parser.parse_args()
    if not args.intent and not args.cases:
        parser.error("either an intent or --cases is required")

    config = load_config(
        args.env_file,
        headless=args.headless or None,
        use_cache=False if args.no_cache else None,
        stop_on_error=False if args.continue_on_error else None,
        step_delay_ms=args.step_delay,
    )
    config.ensure_directories()
    setup_logging(config.log_dir)
    logger = logging.getLogger("stepstream")

    browser = PlaywrightBrowser(headless=config.headless, screenshot_dir=config.screenshot_dir)
    try:
        resolver = VisionResolver.from_config(browser, config) if config.vlm_api_key else None
        if resolver is None:
            logger.warning("VLM_API_KEY not set, semantic fallback is disabled")
        context = ExecutionContext(browser=browser, resolver=resolver)
        controller = Controller(Planner(config), config=config)

        if args.cases:
            with open(args.cases, "r", encoding="utf-8") as f:
                cases = [TestCase(**c) for c in json.load(f)]
            suite = run_test_suite(controller, cases, context, page_url=args.page_url,
                                   filter_priorities=args.priority)
            print(suite.summary.model_dump_json(indent=2))
            return 0 if suite.summary.all_passed else 1

        result = controller.run(args.intent, context)
        print(result.summary.model_dump_json(indent=2))
        for failed in result.failed_steps:
            print(f"  step {failed.step_id}: {failed.description} -> {failed.error}")
        return 0 if result.summary.all_passed else 1
    except EngineError as e:
        logger.error("run failed: %s", e)
        return 2
    finally:
        browser.close()


if __name__ == "__main__":
    sys.exit(main())
