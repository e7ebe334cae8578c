from unittest.mock import MagicMock

from errors import ExternalServiceError
from schemas.results import StreamSummary
from suite import CaseStep, TestCase, case_to_prompt, run_test_case, run_test_suite


def make_case(case_id, priority="P0"):
    return TestCase(
        id=case_id,
        title=f"case {case_id}",
        priority=priority,
        steps=[
            CaseStep(action="input", target="the search box", value="playwright"),
            CaseStep(action="press", value="Enter"),
        ],
        expected_result="Playwright",
    )


def workflow_result(all_passed):
    result = MagicMock()
    result.results = []
    result.summary = StreamSummary(total=2, success=2 if all_passed else 1, fail=0 if all_passed else 1,
                                   all_passed=all_passed)
    return result


def test_case_to_prompt():
    prompt = case_to_prompt(make_case("TC-1"), page_url="https://example.com")
    assert prompt == ('open https://example.com, type playwright into the search box, '
                      'press the Enter key, verify "Playwright"')


def test_run_test_case_passes_options():
    controller = MagicMock()
    controller.run.return_value = workflow_result(True)

    result = run_test_case(controller, make_case("TC-1"), context="ctx", use_cache=False)

    assert result.passed is True
    assert controller.run.call_args.kwargs == {"stop_on_error": True, "step_delay": 0, "use_cache": False}


def test_run_test_case_planning_error_is_a_failed_case():
    controller = MagicMock()
    controller.run.side_effect = ExternalServiceError("planner down")

    result = run_test_case(controller, make_case("TC-1"), context="ctx")

    assert result.passed is False
    assert result.error == "planner down"


def test_suite_filters_by_priority():
    controller = MagicMock()
    controller.run.return_value = workflow_result(True)
    cases = [make_case("a", "P0"), make_case("b", "P2"), make_case("c", "P1")]

    suite = run_test_suite(controller, cases, context="ctx", filter_priorities=["P0", "P1"])

    assert [r.case_id for r in suite.results] == ["a", "c"]
    assert suite.summary.total == 2
    assert suite.summary.all_passed is True


def test_suite_stop_on_first_fail():
    controller = MagicMock()
    controller.run.side_effect = [workflow_result(True), workflow_result(False), workflow_result(True)]
    cases = [make_case("a"), make_case("b"), make_case("c")]

    suite = run_test_suite(controller, cases, context="ctx", stop_on_first_fail=True)

    assert suite.summary.executed == 2
    assert suite.summary.total == 3
    assert suite.summary.failed == 1
    assert suite.summary.all_passed is False
