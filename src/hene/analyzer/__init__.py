from hene.analyzer.component import locate_component as locate_component
from hene.analyzer.nodes import analyze_nodes as analyze_nodes
from hene.analyzer.render import analyze_render as analyze_render
from hene.analyzer.state import analyze_state as analyze_state
