from hene.transformer.class_shell import transform_class_shell as transform_class_shell
from hene.transformer.events import transform_events as transform_events
from hene.transformer.nodes import transform_nodes as transform_nodes
from hene.transformer.render import transform_render as transform_render
from hene.transformer.watchers import transform_watchers as transform_watchers
