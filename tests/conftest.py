import pytest

from sharepoint_provision.errors import NotFoundError, RemoteWriteError
from sharepoint_provision.monitoring import provisioning_stats, rate_monitor
from sharepoint_provision.schema import build_choice_field_schema, read_schema_choices


class FakeSite:
    """In-memory stand-in for SharePointSession."""

    def __init__(self, libraries):
        self.lists = {title: {'Id': f'id-{index}', 'Title': title} for index, title in enumerate(libraries)}
        self.fields = {title: {} for title in libraries}
        self.views = {title: {} for title in libraries}
        self.writes = []
        self.calls = []
        self.disconnects = 0
        self.fail_on_add_field = None
        self.fail_on_disconnect = False

    # seeding helpers
    def seed_field(self, library, internal_name, choices, display_name=None, field_type='Choice'):
        schema = build_choice_field_schema(internal_name, display_name or internal_name, choices)
        self.fields[library][internal_name] = {
            'Id': f'field-{internal_name}',
            'InternalName': internal_name,
            'Title': display_name or internal_name,
            'TypeAsString': field_type,
            'Choices': list(choices),
            'SchemaXml': schema,
            'Description': '',
        }

    def seed_view(self, library, title, fields, query):
        self.views[library][title] = {'Id': f'view-{title}', 'Title': title, 'ViewQuery': query,
                                      'Fields': list(fields)}

    def choices(self, library, internal_name):
        return self.fields[library][internal_name]['Choices']

    # SharePointSession interface
    def get_list(self, title):
        self.calls.append(('get_list', title))
        if title not in self.lists:
            raise NotFoundError(f"Library '{title}' does not exist")
        return self.lists[title]

    def get_field(self, sp_list, internal_name):
        self.calls.append(('get_field', sp_list['Title'], internal_name))
        field = self.fields[sp_list['Title']].get(internal_name)
        return dict(field) if field else None

    def add_field(self, sp_list, internal_name, display_name, choices):
        self.writes.append(('add_field', sp_list['Title'], internal_name))
        if self.fail_on_add_field == (sp_list['Title'], internal_name):
            raise RemoteWriteError("field creation rejected", status_code=400)
        self.seed_field(sp_list['Title'], internal_name, choices, display_name)
        return dict(self.fields[sp_list['Title']][internal_name])

    def set_field_properties(self, sp_list, field, properties):
        internal_name = field['InternalName']
        self.writes.append(('set_field_properties', sp_list['Title'], internal_name, dict(properties)))
        field = self.fields[sp_list['Title']][internal_name]
        field.update(properties)
        if 'SchemaXml' in properties:
            field['Choices'] = read_schema_choices(properties['SchemaXml'])

    def get_view(self, sp_list, title):
        self.calls.append(('get_view', sp_list['Title'], title))
        view = self.views[sp_list['Title']].get(title)
        return dict(view, Fields=list(view['Fields'])) if view else None

    def add_view(self, sp_list, title, fields, query):
        self.writes.append(('add_view', sp_list['Title'], title))
        self.seed_view(sp_list['Title'], title, fields, query)
        return dict(self.views[sp_list['Title']][title])

    def set_view_fields(self, sp_list, title, fields):
        self.writes.append(('set_view_fields', sp_list['Title'], title))
        self.views[sp_list['Title']][title]['Fields'] = list(fields)

    def disconnect(self):
        self.disconnects += 1
        if self.fail_on_disconnect:
            raise RuntimeError("socket already closed")


@pytest.fixture(autouse=True)
def reset_statistics():
    provisioning_stats.reset()
    rate_monitor.reset()
    yield


@pytest.fixture
def make_site():
    return FakeSite
