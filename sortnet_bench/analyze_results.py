#!/usr/bin/env python3

import sys
import ijson
from collections import defaultdict

def read_streaming_results(json_file):
    """Read JSON-lines benchmark results, grouped by algorithm."""
    results = defaultdict(list)

    with open(json_file, 'r') as f:
        try:
            for result in ijson.items(f, '', multiple_values=True):
                if 'algorithm' in result:
                    results[result['algorithm']].append(result)
                else:
                    # Records without an algorithm field
                    results['_errors'].append(result)
        except Exception as e:
            print(f"Error parsing JSON stream: {e}", file=sys.stderr)
            return {}

    return dict(results)

def _pct(part, whole):
    return part / whole * 100 if whole else 0.0

def summarize(results):
    """Per (algorithm, size) summary rows: counts plus mean elapsed and throughput."""
    rows = []
    for algorithm, alg_results in sorted(results.items()):
        by_size = defaultdict(list)
        for r in alg_results:
            by_size[r.get('size')].append(r)
        for size in sorted(by_size, key=lambda s: (s is None, s)):
            runs = by_size[size]
            ran = [r for r in runs if r.get('run_success', False)]
            elapsed = [float(r['elapsed_ms']) for r in ran if r.get('elapsed_ms') is not None]
            rates = [float(r['throughput']) for r in ran if r.get('throughput') is not None]
            rows.append({
                'algorithm': algorithm,
                'size': size,
                'total': len(runs),
                'passed': len(ran),
                'correct': sum(1 for r in runs if r.get('correct', False)),
                'elapsed_ms': sum(elapsed) / len(elapsed) if elapsed else None,
                'throughput': sum(rates) / len(rates) if rates else None,
            })
    return rows

def analyze_results(json_file):
    results = read_streaming_results(json_file)

    print("=" * 80)
    print("SORTING NETWORK BENCHMARK SUMMARY REPORT")
    print("=" * 80)
    print()

    errors = results.pop('_errors', [])

    total_tests = 0
    total_passed = 0
    total_correct = 0

    print(f"{'Algorithm':<12} {'Size':>8} {'Execution':>12} {'Correctness':>12} {'Elapsed (ms)':>14} {'Elements/s':>14}")
    print("-" * 80)

    for row in summarize(results):
        total_tests += row['total']
        total_passed += row['passed']
        total_correct += row['correct']

        elapsed = f"{row['elapsed_ms']:14.3f}" if row['elapsed_ms'] is not None else f"{'n/a':>14}"
        rate = f"{row['throughput']:14.3e}" if row['throughput'] is not None else f"{'n/a':>14}"
        print(f"{row['algorithm']:<12} {str(row['size']):>8} "
              f"{row['passed']:>5}/{row['total']:<6} {row['correct']:>5}/{row['total']:<6} {elapsed} {rate}")

    print()
    print("=" * 80)
    print("OVERALL STATISTICS")
    print("=" * 80)
    print(f"Total Algorithms:      {len(results)}")
    print(f"Total Tests:           {total_tests}")
    print(f"Successful Executions: {total_passed}/{total_tests} ({_pct(total_passed, total_tests):.1f}%)")
    print(f"Correct Results:       {total_correct}/{total_tests} ({_pct(total_correct, total_tests):.1f}%)")

    if errors:
        print(f"Parse/General Errors:  {len(errors)}")

    print()

    # Failure breakdown by error message
    failures = defaultdict(int)
    for alg_results in results.values():
        for r in alg_results:
            if not r.get('run_success', False):
                failures[r.get('error') or 'Unknown error'] += 1

    if failures:
        print("EXECUTION FAILURES")
        print("=" * 80)
        for error, count in sorted(failures.items(), key=lambda item: -item[1]):
            print(f"  {count:>5}  {error}")
        print()

def main():
    if len(sys.argv) != 2:
        print("Usage: python3 analyze_results.py <json_file>")
        return 1

    analyze_results(sys.argv[1])
    return 0

if __name__ == "__main__":
    sys.exit(main())
