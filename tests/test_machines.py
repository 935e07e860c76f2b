import pytest

from conftest import error_doc, list_doc, make_response, resource
from keygen_backend import HeartbeatStatus, ValidationFailed


def machine_resource(id_='mach-1', fingerprint='fp-1', **attributes):
    return resource('machines', id_, fingerprint=fingerprint, **attributes)


class TestMachines:
    def test_list_filters(self, backend, http):
        http.json('GET', 'machines', list_doc([machine_resource(heartbeatStatus='alive')]))
        doc = backend.machines.list(license='lic-1', fingerprint='fp-1', status=HeartbeatStatus.Alive)
        assert http.calls[0].query == 'filter[license]=lic-1&filter[fingerprint]=fp-1&filter[status]=alive'
        assert doc.data[0].attributes.heartbeat_status is HeartbeatStatus.Alive

    def test_activate(self, backend, http):
        http.json('POST', 'machines', {'data': machine_resource()}, status=201)
        backend.machines.activate('fp-1', 'lic-1', hostname='build-01', cores=8)
        assert http.calls[0].body == {
            'data': {
                'type': 'machines',
                'attributes': {'fingerprint': 'fp-1', 'hostname': 'build-01', 'cores': 8},
                'relationships': {'license': {'data': {'type': 'licenses', 'id': 'lic-1'}}},
            },
        }

    def test_activate_limit_reached(self, backend, http):
        http.json(
            'POST', 'machines',
            error_doc('Unprocessable resource', 'machine count has exceeded maximum allowed for license',
                      pointer='/data/relationships/license'),
            status=422,
        )
        with pytest.raises(ValidationFailed) as e:
            backend.machines.activate('fp-1', 'lic-1')
        assert e.value.field == 'license'

    def test_deactivate(self, backend, http):
        http.add('DELETE', 'machines/mach-1', make_response(204))
        backend.machines.deactivate('mach-1')
        assert http.calls_to('DELETE', 'machines/mach-1')

    @pytest.mark.parametrize('method, action', [
        ('check_out', 'check-out'),
        ('ping', 'ping'),
        ('reset_heartbeat', 'reset'),
    ])
    def test_actions(self, backend, http, method, action):
        http.json('POST', f'machines/mach-1/actions/{action}', {'data': machine_resource()})
        machine = getattr(backend.machines, method)('mach-1')
        assert machine.attributes.fingerprint == 'fp-1'

    def test_processes_and_components(self, backend, http):
        http.json('GET', 'machines/mach-1/processes', list_doc([resource('processes', 'proc-1', pid='4242')]))
        http.json('GET', 'machines/mach-1/components',
                  list_doc([resource('components', 'comp-1', name='CPU', fingerprint='cpu-1')]))
        assert backend.machines.get_processes('mach-1').data[0].attributes.pid == '4242'
        assert backend.machines.get_components('mach-1').data[0].attributes.name == 'CPU'

    def test_change_owner(self, backend, http):
        http.json('PATCH', 'machines/mach-1/relationships/user', {'data': resource('users', 'user-2', email='x@y.z', role='user')})
        owner = backend.machines.change_owner('mach-1', 'user-2')
        assert owner.id == 'user-2'
        assert http.calls[0].body == {'data': {'type': 'users', 'id': 'user-2'}}


class TestProcesses:
    def test_list(self, backend, http):
        http.json('GET', 'processes', list_doc([resource('processes', 'proc-1', pid=4242)]))
        doc = backend.processes.list(machine='mach-1')
        assert http.calls[0].query == 'filter[machine]=mach-1'
        assert doc.data[0].attributes.pid == 4242

    def test_kill(self, backend, http):
        http.add('DELETE', 'processes/proc-1', make_response(204))
        backend.processes.kill('proc-1')
        assert http.calls_to('DELETE', 'processes/proc-1')

    def test_spawn(self, backend, http):
        http.json('POST', 'processes', {'data': resource('processes', 'proc-1', pid='99')}, status=201)
        backend.processes.create('mach-1', 99)
        assert http.calls[0].body['data']['attributes'] == {'pid': '99'}
        assert http.calls[0].body['data']['relationships'] == {'machine': {'data': {'type': 'machines', 'id': 'mach-1'}}}


class TestComponents:
    def test_create(self, backend, http):
        http.json('POST', 'components', {'data': resource('components', 'comp-1', name='GPU', fingerprint='gpu-1')},
                  status=201)
        component = backend.components.create('mach-1', 'gpu-1', 'GPU')
        assert component.attributes.fingerprint == 'gpu-1'
        assert http.calls[0].body['data']['attributes'] == {'fingerprint': 'gpu-1', 'name': 'GPU'}
