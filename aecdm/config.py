"""Global configuration: analysis constants and service defaults."""

# AEC Data Model GraphQL endpoint
DEFAULT_GRAPHQL_URL = "https://developer.api.autodesk.com/aec/graphql"

# Seconds before an HTTP call to the data model gives up
DEFAULT_TIMEOUT_S = 30.0

# Page size used when walking cursor-paginated element queries
DEFAULT_PAGE_SIZE = 500

# A mesh with fewer vertices than this is skipped
MIN_MESH_VERTICES = 3

# Smallest allowed box extent per axis, in model units.  Thinner boxes are
# padded by BOX_EXPANSION on each side so volume ratios stay finite.
MIN_BOX_EXTENT = 0.001
BOX_EXPANSION = 0.0005

# Clash detection
CLASH_TOLERANCE = 0.001
MAJOR_INTERSECTION_VOLUME = 0.1
DEFAULT_CLASH_THRESHOLD = 0.01

# Containment is looser than clash detection to absorb modelling slack
CONTAINMENT_TOLERANCE = 0.01
PARTIAL_CONTAINMENT_FRACTION = 0.01

# Fallback label when no keyword matches an element name
UNKNOWN_CATEGORY = "Unknown Category"
