"""Validation of algorithm output against reference results.

Follows the Graphalytics validation rules:
- Exact match: BFS, CDLP (values must be identical)
- Equivalence match: WCC (same partition, label values may differ)
- Epsilon match: PR, LCC, SSSP (relative tolerance)
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from graphref.config import DEFAULT_EPSILON, UNREACHABLE_DISTANCE
from graphref.dispatch import Algorithm

# Stop collecting errors past this many
MAX_ERRORS = 100


@dataclass
class ValidationError:
    """A single mismatch between a result and the reference."""
    error_type: str
    message: str
    vertex_id: Optional[int] = None


@dataclass
class ValidationResult:
    """Result of validating an output map against a reference."""
    valid: bool
    total_vertices: int
    matched_vertices: int
    errors: list = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary."""
        lines = [
            f"Validation {'PASSED' if self.valid else 'FAILED'}",
            f"  Total vertices: {self.total_vertices}",
            f"  Matched vertices: {self.matched_vertices}",
        ]
        if self.errors:
            lines.append(f"  Errors ({len(self.errors)}):")
            for err in self.errors[:10]:
                lines.append(f"    - [{err.error_type}] {err.message}")
            if len(self.errors) > 10:
                lines.append(f"    ... and {len(self.errors) - 10} more errors")
        return "\n".join(lines)


def _parse_real(value) -> float:
    if isinstance(value, str) and value.lower() in ("infinity", "inf", "+infinity"):
        return math.inf
    return float(value)


def _is_unreachable(value: float) -> bool:
    return math.isinf(value) or value >= float(UNREACHABLE_DISTANCE)


def epsilon_match(reference: float, actual: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    """Whether ``actual`` is within relative ``epsilon`` of ``reference``."""
    if _is_unreachable(reference) or _is_unreachable(actual):
        return _is_unreachable(reference) and _is_unreachable(actual)
    return abs(actual - reference) <= epsilon * abs(reference)


def _check_keys(result, reference, errors):
    """Record missing and unexpected vertices; return the shared ids."""
    for vid in reference.keys() - result.keys():
        if len(errors) < MAX_ERRORS:
            errors.append(ValidationError(
                error_type="MISSING_VERTEX",
                message=f"vertex {vid} missing from result",
                vertex_id=vid,
            ))
    for vid in result.keys() - reference.keys():
        if len(errors) < MAX_ERRORS:
            errors.append(ValidationError(
                error_type="UNEXPECTED_VERTEX",
                message=f"vertex {vid} not in reference",
                vertex_id=vid,
            ))
    return sorted(result.keys() & reference.keys())


def _validate_exact(result, reference, errors):
    matched = 0
    for vid in _check_keys(result, reference, errors):
        expected = int(reference[vid])
        actual = int(result[vid])
        if actual == expected:
            matched += 1
        elif len(errors) < MAX_ERRORS:
            errors.append(ValidationError(
                error_type="VALUE_MISMATCH",
                message=f"vertex {vid}: expected {expected}, got {actual}",
                vertex_id=vid,
            ))
    return matched


def _validate_epsilon(result, reference, errors, epsilon):
    matched = 0
    for vid in _check_keys(result, reference, errors):
        expected = _parse_real(reference[vid])
        actual = float(result[vid])
        if epsilon_match(expected, actual, epsilon):
            matched += 1
        elif len(errors) < MAX_ERRORS:
            errors.append(ValidationError(
                error_type="VALUE_MISMATCH",
                message=f"vertex {vid}: expected {expected}, got {actual}",
                vertex_id=vid,
            ))
    return matched


def _validate_equivalence(result, reference, errors):
    """Labels must induce the same partition in both directions."""
    shared = _check_keys(result, reference, errors)

    # Map each label to the first label it was paired with on the other side
    ref_to_result = {}
    result_to_ref = {}
    matched = 0
    for vid in shared:
        ref_label = reference[vid]
        res_label = result[vid]
        expected_res = ref_to_result.setdefault(ref_label, res_label)
        expected_ref = result_to_ref.setdefault(res_label, ref_label)
        if expected_res == res_label and expected_ref == ref_label:
            matched += 1
        elif len(errors) < MAX_ERRORS:
            errors.append(ValidationError(
                error_type="PARTITION_MISMATCH",
                message=(
                    f"vertex {vid}: reference component {ref_label} maps to "
                    f"result component {expected_res}, got {res_label}"
                ),
                vertex_id=vid,
            ))
    return matched


def validate_output(
    algorithm,
    result: dict,
    reference: dict,
    epsilon: float = DEFAULT_EPSILON,
) -> ValidationResult:
    """Validate ``result`` against ``reference`` using the algorithm's rule.

    Args:
        algorithm: ``Algorithm`` member or name
        result: ``{vertex_id: value}`` produced by an engine
        reference: ``{vertex_id: value}``; values may be raw strings as
                   returned by ``graphref.loader.load_reference``
        epsilon: Relative tolerance for real-valued algorithms
    """
    algorithm = Algorithm.from_name(algorithm)
    errors = []

    if algorithm is Algorithm.WCC:
        matched = _validate_equivalence(result, reference, errors)
    elif algorithm.integer_result:
        matched = _validate_exact(result, reference, errors)
    else:
        matched = _validate_epsilon(result, reference, errors, epsilon)

    return ValidationResult(
        valid=not errors,
        total_vertices=len(reference),
        matched_vertices=matched,
        errors=errors,
    )
