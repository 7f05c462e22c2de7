"""
Field Mapper Module

This module resolves one logical bill field from text that may encode it
in several ways.

Architecture:
1. Each field owns an ordered list of matchers (its fallback chain)
2. Matchers are tried in order; each returns an ExtractedField or None
3. The first result that is not a sentinel wins
4. A field nobody matched comes back with value None and method 'not_found'

Why one regex per field isn't enough:
The same charge is printed differently depending on the bill:
  - "3990 kwh 07894 @ 0. Delivery charge 314.97"          (one period)
  - "1297 kwh 07894 @ 0. Delivery charge - Jan 102.39"    (one line per month)
  - "Supply charge - April 18.5 therm @ 0.61252 11.33"    (rate not split)

A matched rate of exactly 0 is treated as "no usable match" and the next
matcher gets a chance. If every matcher comes up with a sentinel, the last
sentinel match is kept so its charge is not lost.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from loguru import logger

from .normalizers import parse_int, parse_number, reconstruct_rate
from .reconciler import ChargeLine, ReconciledCharge, reconcile


DEFAULT_FLAGS = re.IGNORECASE


@dataclass
class ExtractedField:
    """
    Result of extracting a single field from text.
    """
    name: str                           # Dotted field name (e.g. 'electricity.delivery')
    value: Any                          # Converted value, None when not found
    raw_value: str                      # Matched text
    method: str                         # Which kind of matcher found it
    pattern_used: Optional[str] = None  # Which pattern matched
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if extraction was successful."""
        return self.value is not None


class PatternMatcher:
    """
    First match of a regex, converted with a function of the match.

    Usage:
        matcher = PatternMatcher(r'Amount\\s+Due:?\\s+\\$?([\\d,.]+)')
        result = matcher.match('amount_due', text)
    """

    method = "pattern"

    def __init__(
        self,
        pattern: str,
        convert: Optional[Callable[[re.Match], Any]] = None,
        flags: int = DEFAULT_FLAGS,
    ):
        """
        Args:
            pattern: Regex to search for
            convert: Builds the value from the match (default: parse group 1
                as a number)
            flags: Regex flags
        """
        self.pattern = pattern
        self.regex = re.compile(pattern, flags)
        self.convert = convert or (lambda m: parse_number(m.group(1)))

    def match(self, name: str, text: str) -> Optional[ExtractedField]:
        found = self.regex.search(text)
        if not found:
            return None

        return ExtractedField(
            name=name,
            value=self.convert(found),
            raw_value=found.group(0).strip(),
            method=self.method,
            pattern_used=self.pattern,
        )


def split_rate(digits: str) -> float:
    """Rate converter for the '{digits} @ 0.' rendering."""
    return reconstruct_rate(digits)


def literal_rate(value: str) -> float:
    """Rate converter for a rate printed as a plain decimal."""
    return parse_number(value)


class ChargeLineMatcher(PatternMatcher):
    """
    A single '{quantity} ... {rate} ... {charge}' line.

    The pattern must capture quantity, rate and charge as groups 1-3.
    """

    method = "single_period"

    def __init__(
        self,
        pattern: str,
        rate: Callable[[str], float] = split_rate,
        quantity: Callable[[str], float] = parse_number,
        flags: int = DEFAULT_FLAGS,
    ):
        self.parse_rate = rate
        self.parse_quantity = quantity
        super().__init__(pattern, convert=self._to_charge, flags=flags)

    def _to_line(self, found: re.Match) -> ChargeLine:
        return ChargeLine(
            quantity=self.parse_quantity(found.group(1)),
            rate=self.parse_rate(found.group(2)),
            charge=parse_number(found.group(3)),
        )

    def _to_charge(self, found: re.Match) -> ReconciledCharge:
        line = self._to_line(found)
        return ReconciledCharge(rate=line.rate, charge=line.charge)


class RepeatedChargeMatcher(ChargeLineMatcher):
    """
    Every occurrence of a per-month charge line, reconciled into one
    usage-weighted rate and a summed charge.
    """

    method = "multi_month"

    def match(self, name: str, text: str) -> Optional[ExtractedField]:
        matches = list(self.regex.finditer(text))
        if not matches:
            return None

        reconciled = reconcile(self._to_line(m) for m in matches)
        logger.debug(
            f"{name}: reconciled {reconciled.periods} monthly lines "
            f"(rate={reconciled.rate}, charge={reconciled.charge})"
        )

        return ExtractedField(
            name=name,
            value=reconciled,
            raw_value="\n".join(m.group(0).strip() for m in matches),
            method=self.method,
            pattern_used=self.pattern,
        )


def has_rate(value: Any) -> bool:
    """Charge results with a rate of exactly 0 are sentinels."""
    return value.rate != 0


class FallbackChain:
    """
    Resolves one field by trying matchers in priority order.

    Usage:
        chain = FallbackChain('electricity.delivery', [single, monthly],
                              is_resolved=has_rate)
        result = chain.resolve(text)
        if result.is_valid:
            print(result.value.rate, result.value.charge)
    """

    def __init__(
        self,
        name: str,
        matchers: Sequence[PatternMatcher],
        is_resolved: Callable[[Any], bool] = lambda value: True,
    ):
        """
        Args:
            name: Dotted field name used in results and logs
            matchers: Matchers to try, highest priority first
            is_resolved: False for sentinel values that should not stop
                the chain
        """
        self.name = name
        self.matchers = list(matchers)
        self.is_resolved = is_resolved

    def resolve(self, text: str) -> ExtractedField:
        """
        Extract the field from text.

        Returns:
            The first resolved result, else the last sentinel result, else
            a not-found ExtractedField with value None
        """
        last_match = None

        for matcher in self.matchers:
            result = matcher.match(self.name, text)
            if result is None:
                continue

            if self.is_resolved(result.value):
                return result

            logger.debug(
                f"{self.name}: {result.method} match is a sentinel, trying next pattern"
            )
            result.warnings.append(f"Sentinel value from {result.method} pattern")
            last_match = result

        if last_match is not None:
            return last_match

        return ExtractedField(
            name=self.name,
            value=None,
            raw_value="",
            method="not_found",
            warnings=[f"Could not extract '{self.name}'"],
        )


def label(name: str, pattern: str, convert: Optional[Callable[[re.Match], Any]] = None) -> FallbackChain:
    """Chain with a single literal-label pattern and no fallback."""
    return FallbackChain(name, [PatternMatcher(pattern, convert=convert)])


def charge_chain(
    name: str,
    single: Optional[str],
    monthly: Sequence[tuple[str, Callable[[str], float]]] = (),
    quantity: Callable[[str], float] = parse_number,
) -> FallbackChain:
    """
    Chain for a rate/charge pair.

    Args:
        name: Dotted field name
        single: One-period split-digit pattern (None to skip)
        monthly: (pattern, rate converter) pairs for per-month lines
        quantity: Converter for the usage group
    """
    matchers: list[PatternMatcher] = []
    if single:
        matchers.append(ChargeLineMatcher(single, rate=split_rate, quantity=quantity))
    for pattern, rate in monthly:
        matchers.append(RepeatedChargeMatcher(pattern, rate=rate, quantity=quantity))

    return FallbackChain(name, matchers, is_resolved=has_rate)


class FieldMapper:
    """
    Runs a set of chains over one text and keeps track of what was missed.

    Usage:
        mapper = FieldMapper(text)
        usage = mapper.value(USAGE_CHAIN, default=0)
        print(mapper.missing)
    """

    def __init__(self, text: str):
        self.text = text or ""
        self.results: list[ExtractedField] = []

    def extract(self, chain: FallbackChain) -> ExtractedField:
        result = chain.resolve(self.text)
        self.results.append(result)
        return result

    def value(self, chain: FallbackChain, default: Any = None) -> Any:
        """Resolved value of a chain, or default when not found."""
        result = self.extract(chain)
        return result.value if result.is_valid else default

    @property
    def missing(self) -> tuple[str, ...]:
        """Names of the chains that found nothing, in extraction order."""
        return tuple(r.name for r in self.results if not r.is_valid)
