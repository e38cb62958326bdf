from hene.template.interpolation import Segment as Segment
from hene.template.interpolation import Span as Span
from hene.template.interpolation import find_interpolations as find_interpolations
from hene.template.interpolation import split_segments as split_segments
from hene.template.parser import ElementNode as ElementNode
from hene.template.parser import TemplateNode as TemplateNode
from hene.template.parser import TextNode as TextNode
from hene.template.parser import parse_template as parse_template
