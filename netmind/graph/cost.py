from typing import Any, Dict, Iterable, List, Mapping

from .adjacency import link_label
from .numeric import as_number, tidy


def cost_efficiency(
    links: Iterable[Mapping[str, Any]],
    labels: Mapping[str, str],
) -> List[Dict[str, Any]]:
    """
    Price per Gbps of every link that carries both a price and a bandwidth,
    cheapest first.
    """
    rows = []
    for link in links:
        price = as_number(link.get("price_usd"))
        bandwidth = as_number(link.get("bandwidth_gbps"))
        if price <= 0 or bandwidth <= 0:
            continue
        rows.append({
            "link": link_label(link, labels),
            "label": link.get("label") or "",
            "price_usd": tidy(price),
            "bandwidth_gbps": tidy(bandwidth),
            "cost_per_gbps": round(price / bandwidth, 2),
        })

    rows.sort(key=lambda row: row["cost_per_gbps"])
    return rows
