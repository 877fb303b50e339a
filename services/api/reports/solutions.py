"""
Rule-based remediation suggestions for reports.

Per report: look up the report's category in SOLUTION_TEMPLATES and take
the first template whose key, or any single word of the key, appears in
the lowercased report text. No match (or no templates for the category)
yields the generic plan, whose priority is "high" above severity 7.

City-wide: one initiative for the most reported category when it has
more than 5 reports, one programme for the most reported district when it
has more than 3. Ties go to the first-seen category/district.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Sequence

from services.api.reports.types import Report

CITYWIDE_CATEGORY_THRESHOLD = 5
CITYWIDE_DISTRICT_THRESHOLD = 3
GENERIC_HIGH_PRIORITY_ABOVE = 7


@dataclass(frozen=True)
class Solution:
    id: str
    title: str
    description: str
    steps: tuple[str, ...]
    priority: str  # low | medium | high | critical
    estimated_time: str
    cost: str  # free | low | medium | high
    responsible: tuple[str, ...] = field(default_factory=tuple)
    resources: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "steps": list(self.steps),
            "priority": self.priority,
            "estimatedTime": self.estimated_time,
            "cost": self.cost,
            "responsible": list(self.responsible),
            "resources": list(self.resources),
        }


# ---------------------------------------------------------------------------
# Templates: category -> (trigger phrase -> solution)
# ---------------------------------------------------------------------------

def _template(title, description, steps, priority, estimated_time, cost, responsible, resources):
    return Solution(
        id="",
        title=title,
        description=description,
        steps=tuple(steps),
        priority=priority,
        estimated_time=estimated_time,
        cost=cost,
        responsible=tuple(responsible),
        resources=tuple(resources),
    )


SOLUTION_TEMPLATES: Mapping[str, Mapping[str, Solution]] = MappingProxyType({
    "Housing": MappingProxyType({
        "heating issue": _template(
            "Heating System Repair",
            "Address heating problems in residential buildings",
            [
                "Contact building management or landlord immediately",
                "Document the issue with photos and temperature readings",
                "Check if other units are affected",
                "Contact local housing authority if landlord is unresponsive",
                "Consider temporary heating solutions for safety",
            ],
            "high", "1-3 days", "medium",
            ["Building Management", "HVAC Technician", "Housing Authority"],
            ["Tenant Rights Guide", "Emergency Heating Assistance", "HVAC Repair Services"],
        ),
        "water problem": _template(
            "Water System Maintenance",
            "Resolve water supply and quality issues",
            [
                "Report to water utility company immediately",
                "Document water quality issues with photos/samples",
                "Check with neighbors about similar problems",
                "Contact health department for water quality concerns",
                "Arrange temporary water supply if needed",
            ],
            "critical", "4-24 hours", "low",
            ["Water Utility", "Health Department", "Building Management"],
            ["Water Quality Testing", "Emergency Water Supply", "Utility Contact Info"],
        ),
    }),
    "Roads": MappingProxyType({
        "pothole": _template(
            "Road Surface Repair",
            "Fix dangerous potholes and road damage",
            [
                "Report to city transportation department",
                "Document location with GPS coordinates",
                "Take photos showing size and severity",
                "Submit online complaint or call hotline",
                "Follow up if not addressed within reasonable time",
            ],
            "medium", "1-2 weeks", "medium",
            ["City Transportation", "Road Maintenance Crew"],
            ["City Complaint Portal", "Transportation Department Contact", "Road Repair Timeline"],
        ),
        "traffic jam": _template(
            "Traffic Flow Optimization",
            "Improve traffic management and reduce congestion",
            [
                "Analyze traffic patterns and peak hours",
                "Report to traffic management authority",
                "Suggest alternative routes to commuters",
                "Propose traffic signal timing adjustments",
                "Consider public transportation alternatives",
            ],
            "medium", "2-4 weeks", "high",
            ["Traffic Management", "City Planning", "Transportation Authority"],
            ["Traffic Analysis Tools", "Public Transit Info", "Alternative Route Maps"],
        ),
    }),
    "Transport": MappingProxyType({
        "bus delay": _template(
            "Public Transit Improvement",
            "Address delays and improve service reliability",
            [
                "Report delays to transit authority",
                "Document patterns of delays with times/dates",
                "Check for service alerts and updates",
                "Suggest schedule adjustments based on data",
                "Advocate for additional buses during peak hours",
            ],
            "medium", "2-6 weeks", "high",
            ["Transit Authority", "Route Planners", "Operations Management"],
            ["Transit App", "Service Alerts", "Customer Service Contact"],
        ),
    }),
    "Safety": MappingProxyType({
        "crime": _template(
            "Community Safety Enhancement",
            "Improve neighborhood security and safety measures",
            [
                "Report incidents to police immediately",
                "Contact community policing officer",
                "Organize neighborhood watch program",
                "Improve lighting in problem areas",
                "Install security cameras if appropriate",
            ],
            "high", "1-8 weeks", "medium",
            ["Police Department", "Community Leaders", "City Council"],
            ["Police Non-Emergency Line", "Community Safety Programs", "Neighborhood Watch Guide"],
        ),
    }),
    "Environment": MappingProxyType({
        "pollution": _template(
            "Environmental Cleanup Initiative",
            "Address pollution and environmental health concerns",
            [
                "Report to environmental protection agency",
                "Document pollution sources with evidence",
                "Contact local health department",
                "Organize community cleanup events",
                "Advocate for stricter environmental regulations",
            ],
            "high", "2-12 weeks", "medium",
            ["EPA", "Health Department", "Environmental Groups"],
            ["Pollution Reporting Portal", "Environmental Testing", "Community Action Groups"],
        ),
    }),
})


# ---------------------------------------------------------------------------
# Per-report solutions
# ---------------------------------------------------------------------------

def _matches_trigger(trigger: str, text_lower: str) -> bool:
    return trigger in text_lower or any(word in text_lower for word in trigger.split())


def generate_solution(report: Report) -> Solution:
    templates = SOLUTION_TEMPLATES.get(report.category or "Other", {})
    text_lower = report.text.lower()

    for trigger, template in templates.items():
        if _matches_trigger(trigger, text_lower):
            return replace(
                template,
                id=f"solution_{report.id}",
                title=f"{template.title} - {report.district}",
                description=f"{template.description} in {report.location}",
            )

    return generate_generic_solution(report)


def generate_generic_solution(report: Report) -> Solution:
    high = report.severity is not None and report.severity > GENERIC_HIGH_PRIORITY_ABOVE
    return Solution(
        id=f"solution_{report.id}",
        title=f"Address Issue in {report.district}",
        description=f"General solution approach for reported problem in {report.location}",
        steps=(
            "Document the issue with photos and detailed description",
            "Contact relevant city department or authority",
            "Submit formal complaint through official channels",
            "Follow up regularly on progress",
            "Engage community support if needed",
        ),
        priority="high" if high else "medium",
        estimated_time="1-4 weeks",
        cost="medium",
        responsible=("City Administration", "Local Representatives"),
        resources=("City Complaint Portal", "Local Government Contacts", "Community Resources"),
    )


def generate_batch_solutions(reports: Sequence[Report]) -> list[Solution]:
    """Solutions for analyzed reports that carry a category."""
    return [generate_solution(r) for r in reports if r.analyzed and r.category]


# ---------------------------------------------------------------------------
# City-wide solutions
# ---------------------------------------------------------------------------

def _top(counts: Counter) -> tuple[str, int] | None:
    if not counts:
        return None
    # max() returns the first maximal item, i.e. the first seen on ties
    return max(counts.items(), key=lambda item: item[1])


def generate_city_wide_solutions(reports: Sequence[Report]) -> list[Solution]:
    categories = Counter(r.category for r in reports if r.category)
    districts = Counter(r.district for r in reports)
    solutions: list[Solution] = []

    top_category = _top(categories)
    if top_category and top_category[1] > CITYWIDE_CATEGORY_THRESHOLD:
        name = top_category[0]
        solutions.append(Solution(
            id="citywide_category",
            title=f"City-Wide {name} Improvement Initiative",
            description=f"Comprehensive plan to address {name.lower()} issues across the city",
            steps=(
                f"Conduct city-wide audit of {name.lower()} infrastructure",
                "Allocate emergency budget for immediate fixes",
                "Develop long-term improvement plan",
                "Establish regular maintenance schedule",
                "Create citizen reporting system",
            ),
            priority="high",
            estimated_time="3-6 months",
            cost="high",
            responsible=("City Council", "Department Heads", "Budget Committee"),
            resources=("City Budget", "Infrastructure Assessment", "Citizen Engagement Platform"),
        ))

    top_district = _top(districts)
    if top_district and top_district[1] > CITYWIDE_DISTRICT_THRESHOLD:
        name = top_district[0]
        solutions.append(Solution(
            id="district_focus",
            title=f"{name} District Revitalization Program",
            description=f"Focused improvement program for {name} district",
            steps=(
                "Establish district task force",
                "Conduct community needs assessment",
                "Prioritize most critical issues",
                "Implement quick wins for immediate impact",
                "Develop long-term district improvement plan",
            ),
            priority="high",
            estimated_time="2-4 months",
            cost="high",
            responsible=("District Council", "Community Leaders", "City Planning"),
            resources=("Community Engagement", "District Budget", "Planning Resources"),
        ))

    return solutions
