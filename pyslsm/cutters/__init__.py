from .element_cutter import compute_mesh_status, element_area_fractions
from .edge_cutter import EdgePointCache, interpolate_edge, edge_key
__all__=['compute_mesh_status','element_area_fractions','EdgePointCache','interpolate_edge','edge_key']
