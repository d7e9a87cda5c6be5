#!/usr/bin/env python
"""
Test runner script for comprehensive test execution and coverage
Usage: python Doc/run_tests.py [--coverage] (from the project root)

--coverage measures the backend package and prints a report; it needs the
"test" extra (pip install -e .[test]).
"""
import os
import sys

TEST_LABELS = [
    'backend.core',
    'backend.catalog',
    'backend.pricing',
    'backend.content',
    'backend.orders',
]


def run_tests():
    import django
    from django.conf import settings
    from django.test.utils import get_runner

    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    return test_runner.run_tests(TEST_LABELS)


if __name__ == "__main__":
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'backend.config.settings')

    if '--coverage' in sys.argv[1:]:
        import coverage

        # Started before django.setup() so module-level code is measured too
        cov = coverage.Coverage(source=['backend'], omit=['*/tests.py', '*/test_utils.py'])
        cov.start()
        failures = run_tests()
        cov.stop()
        cov.save()
        cov.report(show_missing=True)
    else:
        failures = run_tests()

    sys.exit(bool(failures))
