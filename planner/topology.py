"""
Topology Graph — NetworkX DiGraph of the planning network.

Represents plants, distribution centers and regions as typed nodes with
edges for routable lanes (LANE, plant → DC, carrying distance) and
geographic membership (IN_REGION).

Queries that read more naturally as graph walks than as list scans:
  - Nearest-first sourcing: "Which plants have a lane to DC X, closest first?"
  - Impact analysis: "Which DCs lose every inbound lane if plant X is down?"
  - Supply diversity: "How many laned plants per region feed DC X?"

Node IDs use type prefixes (plant:, dc:, region:) so that a plant and a
region sharing a code ("US") never collide.
"""

import networkx as nx

from planner.network import Network, Plant


class NetworkGraph:
    """NetworkX DiGraph representing the plant → DC lane topology."""

    def __init__(self, network: Network):
        self._network = network
        self.graph = nx.DiGraph()
        self._build()

    def _build(self):
        """Construct the graph from the Network entities."""
        g = self.graph

        regions = {p.region for p in self._network.plants} | {dc.region for dc in self._network.dcs}
        for region in sorted(regions):
            g.add_node(f"region:{region}", node_type="region", region=region)

        # ── Plant nodes + IN_REGION edges ─────────────────────────────────
        # order= keeps the network's plant order for tie-breaking.
        for order, p in enumerate(self._network.plants):
            g.add_node(
                f"plant:{p.plant_id}",
                node_type="plant",
                plant_id=p.plant_id,
                name=p.name,
                region=p.region,
                capacity=p.capacity,
                order=order,
            )
            g.add_edge(f"plant:{p.plant_id}", f"region:{p.region}", edge_type="IN_REGION")

        # ── DC nodes + IN_REGION edges ────────────────────────────────────
        for dc in self._network.dcs:
            g.add_node(
                f"dc:{dc.dc_id}",
                node_type="dc",
                dc_id=dc.dc_id,
                name=dc.name,
                region=dc.region,
            )
            g.add_edge(f"dc:{dc.dc_id}", f"region:{dc.region}", edge_type="IN_REGION")

        # ── LANE edges (plant → DC) ───────────────────────────────────────
        for lane in self._network.lanes:
            g.add_edge(
                f"plant:{lane.plant_id}", f"dc:{lane.dc_id}",
                edge_type="LANE",
                distance=lane.distance,
            )

    # ═══════════════════════════════════════════════════════════════════════
    # QUERY METHODS
    # ═══════════════════════════════════════════════════════════════════════

    def get_nodes_by_type(self, node_type: str) -> list[str]:
        """Return node IDs of the given type (plant, dc, region)."""
        return [n for n, d in self.graph.nodes(data=True)
                if d.get("node_type") == node_type]

    def _inbound_lanes(self, dc_id: str) -> list[tuple[str, dict]]:
        dc_node = f"dc:{dc_id}"
        if dc_node not in self.graph:
            return []
        return [(source, attrs) for source, _, attrs
                in self.graph.in_edges(dc_node, data=True)
                if attrs.get("edge_type") == "LANE"]

    def plants_by_distance(self, dc_id: str, plant_ids=None) -> list[Plant]:
        """Plants with a lane to this DC, nearest first.

        Plants without a lane are left out (absence is not zero distance).
        Equal distances keep the network's plant order. If plant_ids is
        given, only those plants are considered.
        """
        candidates = []
        for source, attrs in self._inbound_lanes(dc_id):
            node = self.graph.nodes[source]
            if plant_ids is not None and node["plant_id"] not in plant_ids:
                continue
            candidates.append((attrs["distance"], node["order"], node["plant_id"]))
        candidates.sort()
        return [self._network.get_plant(pid) for _, _, pid in candidates]

    def impact_analysis(self, plant_id: str) -> list[str]:
        """Which DCs lose ALL inbound lanes if this plant is down?

        Returns DC IDs that are fed ONLY by this plant.
        """
        plant_node = f"plant:{plant_id}"
        if plant_node not in self.graph:
            return []

        fed = [target for _, target, attrs in self.graph.edges(plant_node, data=True)
               if attrs.get("edge_type") == "LANE"]

        solely_dependent = []
        for dc_node in fed:
            dc_id = self.graph.nodes[dc_node]["dc_id"]
            feeders = [source for source, _ in self._inbound_lanes(dc_id)]
            if feeders == [plant_node]:
                solely_dependent.append(dc_id)
        return solely_dependent

    def supply_diversity(self, dc_id: str) -> dict[str, int]:
        """Count plants per region that have a lane into this DC.

        Returns {region: plant_count}.
        """
        counts: dict[str, int] = {}
        for source, _ in self._inbound_lanes(dc_id):
            region = self.graph.nodes[source].get("region", "unknown")
            counts[region] = counts.get(region, 0) + 1
        return counts
