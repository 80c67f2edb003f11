"""Built-in variable catalogue and derived variable computation."""

from collections.abc import Iterable, Mapping
from typing import Any

from messmass.core.exceptions import CircularReferenceError
from messmass.core.logging import get_logger
from messmass.formula.dependencies import FormulaDependencyGraph
from messmass.formula.engine import evaluate_formula, extract_variables_from_formula
from messmass.formula.parser import make_field_ref
from messmass.formula.result import NA
from messmass.schemas.variable import VariableDefinition, VariableType

logger = get_logger(__name__)


def _base(name: str, label: str, category: str, **kwargs: Any) -> VariableDefinition:
    return VariableDefinition(name=name, label=label, category=category, **kwargs)


BASE_STATS_VARIABLES: list[VariableDefinition] = [
    # Images
    _base("remoteImages", "Remote Images", "Images"),
    _base("hostessImages", "Hostess Images", "Images"),
    _base("selfies", "Selfies", "Images"),
    _base("approvedImages", "Approved Images", "Images"),
    _base("rejectedImages", "Rejected Images", "Images"),
    # Fans
    _base("indoor", "Indoor", "Fans"),
    _base("outdoor", "Outdoor", "Fans"),
    _base("stadium", "Stadium", "Fans"),
    # Demographics
    _base("female", "Female", "Demographics"),
    _base("male", "Male", "Demographics"),
    _base("genAlpha", "Gen Alpha", "Demographics"),
    _base("genYZ", "Gen YZ", "Demographics"),
    _base("genX", "Gen X", "Demographics"),
    _base("boomer", "Boomer", "Demographics"),
    # Merchandise
    _base("merched", "People with Merch", "Merchandise"),
    _base("jersey", "Jersey", "Merchandise"),
    _base("scarf", "Scarf", "Merchandise"),
    _base("flags", "Flags", "Merchandise"),
    _base("baseballCap", "Baseball Cap", "Merchandise"),
    _base("other", "Other", "Merchandise"),
    # Merchandise pricing
    _base("jerseyPrice", "Jersey Price", "Merchandise Pricing", type=VariableType.CURRENCY, unit="€"),
    _base("scarfPrice", "Scarf Price", "Merchandise Pricing", type=VariableType.CURRENCY, unit="€"),
    _base("flagsPrice", "Flags Price", "Merchandise Pricing", type=VariableType.CURRENCY, unit="€"),
    _base("capPrice", "Cap Price", "Merchandise Pricing", type=VariableType.CURRENCY, unit="€"),
    _base("otherPrice", "Other Price", "Merchandise Pricing", type=VariableType.CURRENCY, unit="€"),
    # Visits
    _base("visitQrCode", "QR Code Visits", "Visits"),
    _base("visitShortUrl", "Short URL Visits", "Visits"),
    _base("visitWeb", "Web Visits", "Visits"),
    # Event
    _base("eventAttendees", "Event Attendees", "Event"),
    _base("eventTicketPurchases", "Ticket Purchases", "Event"),
    _base("eventResultHome", "Result Home", "Event"),
    _base("eventResultVisitor", "Result Visitor", "Event"),
    _base("eventValuePropositionVisited", "Value Proposition Visited", "Event"),
    _base("eventValuePropositionPurchases", "Value Proposition Purchases", "Event"),
    # Bitly
    _base("bitlyTotalClicks", "Bitly Total Clicks", "Bitly", unit="clicks"),
    _base("bitlyUniqueClicks", "Bitly Unique Clicks", "Bitly", unit="clicks"),
    _base("bitlyMobileClicks", "Bitly Mobile Clicks", "Bitly", unit="clicks"),
]

DERIVED_VARIABLES: list[VariableDefinition] = [
    VariableDefinition(
        name="allImages",
        label="Total Images",
        category="Images",
        derived=True,
        formula="[remoteImages] + [hostessImages] + [selfies]",
        description="Sum of Remote, Hostess, and Selfies",
    ),
    VariableDefinition(
        name="remoteFans",
        label="Remote Fans",
        category="Fans",
        derived=True,
        formula="[indoor] + [outdoor]",
        description="Fans counted off-site (Indoor + Outdoor)",
    ),
    VariableDefinition(
        name="totalFans",
        label="Total Fans",
        category="Fans",
        derived=True,
        formula="[remoteFans] + [stadium]",
        description="Total fans counted across remote and on-site (Remote + Stadium)",
    ),
    VariableDefinition(
        name="totalUnder40",
        label="Total Under 40",
        category="Demographics",
        derived=True,
        formula="[genAlpha] + [genYZ]",
        description="Gen Alpha + Gen YZ",
    ),
    VariableDefinition(
        name="totalOver40",
        label="Total Over 40",
        category="Demographics",
        derived=True,
        formula="[genX] + [boomer]",
        description="Gen X + Boomer",
    ),
    VariableDefinition(
        name="bitlyClickRate",
        label="Bitly Click-Through Rate",
        category="Bitly",
        type=VariableType.PERCENTAGE,
        unit="%",
        derived=True,
        formula="([bitlyTotalClicks] / [eventAttendees]) * 100",
        description="Percentage of attendees who clicked Bitly links",
    ),
    VariableDefinition(
        name="bitlyMobileRate",
        label="Bitly Mobile Usage Rate",
        category="Bitly",
        type=VariableType.PERCENTAGE,
        unit="%",
        derived=True,
        formula="([bitlyMobileClicks] / [bitlyTotalClicks]) * 100",
        description="Percentage of Bitly clicks from mobile devices",
    ),
]

TEXT_VARIABLES_STATIC: list[VariableDefinition] = [
    VariableDefinition(
        name="hashtags",
        label="General Hashtags",
        category="Hashtags",
        type=VariableType.TEXT,
        description="All general hashtags (plain list)",
    ),
]


def build_category_text_variables(categories: Iterable[Mapping[str, Any]]) -> list[VariableDefinition]:
    """Create one hashtagsCategory:<name> text variable per hashtag category."""
    variables = []
    for category in categories:
        key = (category.get("name") or "").strip()
        if not key:
            continue
        variables.append(
            VariableDefinition(
                name=f"hashtagsCategory:{key}",
                label=f"Hashtags: {key}",
                category="Hashtags by Category",
                type=VariableType.TEXT,
                description=f'All hashtags in the "{key}" category',
            )
        )
    return variables


def get_all_variable_definitions(
    categories: Iterable[Mapping[str, Any]] = (),
) -> list[VariableDefinition]:
    """Full built-in catalogue, including per-category hashtag variables."""
    return [
        *BASE_STATS_VARIABLES,
        *DERIVED_VARIABLES,
        *TEXT_VARIABLES_STATIC,
        *build_category_text_variables(categories),
    ]


def build_dependency_graph(definitions: Iterable[VariableDefinition]) -> FormulaDependencyGraph:
    """
    Build the dependency graph of the derived definitions.

    Raises:
        CircularReferenceError: If derived definitions reference each other in a cycle
    """
    graph = FormulaDependencyGraph()
    for definition in definitions:
        if not definition.derived or not definition.formula:
            continue
        depends_on = {
            make_field_ref(token).field_name
            for token in extract_variables_from_formula(definition.formula)
        }
        success, _ = graph.add_variable(definition.name, depends_on)
        if not success:
            raise CircularReferenceError(definition.name)
    return graph


def get_affected_derived_variables(
    changed: str,
    definitions: Iterable[VariableDefinition] = DERIVED_VARIABLES,
) -> list[str]:
    """
    Derived variables that go stale when a stats field changes.

    Returns:
        Transitive dependents of changed, in evaluation order
    """
    graph = build_dependency_graph(definitions)
    return graph.get_evaluation_order(set(graph.get_affected_variables(changed)))


def compute_derived_variables(
    stats: Mapping[str, Any],
    definitions: Iterable[VariableDefinition] = DERIVED_VARIABLES,
) -> dict[str, Any]:
    """
    Evaluate derived variable formulas into a copy of the record.

    Definitions are evaluated in dependency order so a derived variable can
    build on another. Values already stored in the record win, and NA
    results are left out.

    Raises:
        CircularReferenceError: If derived definitions reference each other in a cycle
    """
    derived = {d.name: d for d in definitions if d.derived and d.formula}
    graph = build_dependency_graph(derived.values())

    enriched = dict(stats)
    for name in graph.get_evaluation_order(set(derived)):
        if enriched.get(name) is not None:
            continue
        value = evaluate_formula(derived[name].formula, enriched)
        if value is NA:
            logger.debug("Derived variable is not applicable", extra={"variable": name})
            continue
        enriched[name] = value
    return enriched
