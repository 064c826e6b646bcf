"""
Namespaces and vocabulary terms.

Single place for every IRI the rulebase compiler and the aggregation
engine compare against.
"""

# =============================================================================
# Namespaces
# =============================================================================

RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
RDFS_NS = "http://www.w3.org/2000/01/rdf-schema#"
OWL_NS = "http://www.w3.org/2002/07/owl#"
XSD_NS = "http://www.w3.org/2001/XMLSchema#"
OLO_NS = "http://purl.org/ontology/olo/core#"
SPINDLE_NS = "http://bbcarchdev.github.io/ns/spindle#"
GEO_NS = "http://www.w3.org/2003/01/geo/wgs84_pos#"
DCTERMS_NS = "http://purl.org/dc/terms/"

# RDF / RDFS / OWL
RDF_TYPE = RDF_NS + "type"
RDFS_LABEL = RDFS_NS + "label"
RDFS_DOMAIN = RDFS_NS + "domain"
RDFS_LITERAL = RDFS_NS + "Literal"
RDFS_RESOURCE = RDFS_NS + "Resource"
OWL_SAME_AS = OWL_NS + "sameAs"

# XSD datatypes
XSD_BOOLEAN = XSD_NS + "boolean"
XSD_DECIMAL = XSD_NS + "decimal"
XSD_STRING = XSD_NS + "string"

# Datatypes which satisfy an xsd:decimal expectation
XSD_INTEGER_TYPES = frozenset(
    XSD_NS + name
    for name in (
        "integer",
        "long",
        "short",
        "byte",
        "int",
        "nonPositiveInteger",
        "nonNegativeInteger",
        "negativeInteger",
        "positiveInteger",
        "unsignedLong",
        "unsignedInt",
        "unsignedShort",
        "unsignedByte",
    )
)

# Ordered list ontology
OLO_INDEX = OLO_NS + "index"

# Rulebase vocabulary
SPINDLE_CLASS = SPINDLE_NS + "Class"
SPINDLE_PROPERTY = SPINDLE_NS + "Property"
SPINDLE_EXPRESSED_AS = SPINDLE_NS + "expressedAs"
SPINDLE_PROMINENCE = SPINDLE_NS + "prominence"
SPINDLE_EXPECT = SPINDLE_NS + "expect"
SPINDLE_EXPECT_TYPE = SPINDLE_NS + "expectType"
SPINDLE_PROXY_ONLY = SPINDLE_NS + "proxyOnly"
SPINDLE_INDEXED = SPINDLE_NS + "indexed"
SPINDLE_INVERSE = SPINDLE_NS + "inverse"
SPINDLE_PROPERTY_MATCH = SPINDLE_NS + "property"
SPINDLE_INVERSE_PROPERTY = SPINDLE_NS + "inverseProperty"
SPINDLE_COREF = SPINDLE_NS + "coref"

# Co-reference match types
SPINDLE_RESOURCE_MATCH = SPINDLE_NS + "resourceMatch"
SPINDLE_WIKIPEDIA_MATCH = SPINDLE_NS + "wikipediaMatch"

# Properties with side effects on the proxy entry
GEO_LAT = GEO_NS + "lat"
GEO_LONG = GEO_NS + "long"
DCTERMS_DESCRIPTION = DCTERMS_NS + "description"
