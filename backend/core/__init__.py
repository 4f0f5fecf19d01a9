from core.db_connector import CatalogAccessor, create_engine_from_request  # noqa: F401
from core.schema_introspector import get_table_ddl_definition, list_table_names  # noqa: F401
from core.ddl_synthesizer import render_create_index, render_create_table  # noqa: F401
from core.metamodel import Metamodel, load_metamodel  # noqa: F401
from core.entity_extractor import get_entity_definition, list_entity_names  # noqa: F401
from core.report_renderer import render_entity_report, render_selection, render_table_report  # noqa: F401
from core.errors import ConfigurationError, IntrospectionError, NotFoundError, SchemascopeError  # noqa: F401
