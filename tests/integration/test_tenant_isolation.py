"""
Critical integration tests for tenant isolation.
These tests ensure that data is properly isolated between clinics.
"""

import pytest
from app.models import Owner, InventoryItem, SaleRecord


def login_as(client, user, tenant):
    with client.session_transaction() as sess:
        sess['user_id'] = user.id
        sess['tenant_id'] = tenant.id


@pytest.fixture
def owner_user2(tenant2, user_factory):
    return user_factory(tenant2, role='OWNER')


class TestOwnerIsolation:
    """Clients of one clinic are invisible to another."""

    def test_list_only_shows_own_clients(self, authenticated_client, tenant1, tenant2, owner_factory):
        own = owner_factory(tenant1, 1)
        owner_factory(tenant2, 1)

        response = authenticated_client.get('/owners')

        assert response.status_code == 200
        assert [o['id'] for o in response.get_json()] == [own.id]

    def test_cannot_read_other_clinic_client(self, authenticated_client, tenant2, owner_factory):
        other = owner_factory(tenant2, 1)
        response = authenticated_client.get(f'/owners/{other.id}')
        assert response.status_code == 404

    def test_same_client_number_in_different_clinics(self, session, tenant1, tenant2, owner_factory):
        owner_factory(tenant1, 1)
        owner_factory(tenant2, 1)
        assert session.query(Owner).filter_by(client_number='CL-00001').count() == 2

    def test_client_numbering_is_per_clinic(self, client, owner_user1, owner_user2, tenant1, tenant2):
        login_as(client, owner_user1, tenant1)
        client.post('/owners', json={'name': 'Ana'})
        client.post('/owners', json={'name': 'Bruno'})

        login_as(client, owner_user2, tenant2)
        response = client.post('/owners', json={'name': 'Carla'})

        assert response.status_code == 201
        assert response.get_json()['clientNumber'] == 'CL-00001'


class TestSalesIsolation:

    def test_sales_listing_and_numbering(self, client, owner_user1, owner_user2, tenant1, tenant2):
        login_as(client, owner_user1, tenant1)
        first = client.post('/sales', json={'items': [{'name': 'Consult', 'quantity': 1}], 'total': 50})
        assert first.get_json()['invoiceNumber'] == 'INV-0001'

        login_as(client, owner_user2, tenant2)
        second = client.post('/sales', json={'items': [{'name': 'Consult', 'quantity': 1}], 'total': 50})
        assert second.get_json()['invoiceNumber'] == 'INV-0001'

        listing = client.get('/sales').get_json()
        assert [s['id'] for s in listing] == [second.get_json()['id']]

    def test_cannot_delete_other_clinic_sale(self, client, owner_user1, owner_user2, tenant1, tenant2):
        login_as(client, owner_user2, tenant2)
        sale_id = client.post('/sales', json={'items': [{'name': 'Consult'}], 'total': 10}).get_json()['id']

        login_as(client, owner_user1, tenant1)
        assert client.delete(f'/sales/{sale_id}').status_code == 404

    def test_sale_cannot_reference_other_clinic_client(self, session, authenticated_client,
                                                       tenant1, tenant2, owner_factory):
        other = owner_factory(tenant2, 1)

        response = authenticated_client.post('/sales', json={
            'items': [{'name': 'Consult'}], 'total': 50, 'clientId': other.id
        })

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Client not found'
        assert session.query(SaleRecord).filter_by(tenant_id=tenant1.id).count() == 0

        session.refresh(tenant1)
        assert tenant1.storage_used_mb == 0.0

    def test_sale_with_unknown_client_is_not_found(self, authenticated_client):
        response = authenticated_client.post('/sales', json={
            'items': [{'name': 'Consult'}], 'clientId': 999999
        })
        assert response.status_code == 404

    def test_sale_links_own_client(self, authenticated_client, tenant1, owner_factory):
        own = owner_factory(tenant1, 1)

        response = authenticated_client.post('/sales', json={
            'items': [{'name': 'Consult'}], 'total': 50, 'clientId': own.id
        })

        assert response.status_code == 201
        assert response.get_json()['clientId'] == own.id
        assert response.get_json()['clientName'] == own.name


class TestInventoryIsolation:

    def test_cannot_update_other_clinic_item(self, session, authenticated_client, tenant2):
        item = InventoryItem(tenant_id=tenant2.id, name='Other vaccine', type='Product', stock=5)
        session.add(item)
        session.commit()

        response = authenticated_client.patch(f'/inventory/{item.id}', json={'stock': 100})
        assert response.status_code == 404

        session.refresh(item)
        assert item.stock == 5

    def test_sale_cannot_deduct_other_clinic_stock(self, session, authenticated_client, tenant2):
        item = InventoryItem(tenant_id=tenant2.id, name='Other vaccine', type='Product', stock=5)
        session.add(item)
        session.commit()

        response = authenticated_client.post('/sales', json={
            'items': [{'inventoryItemId': item.id, 'name': 'Other vaccine', 'quantity': 3}],
            'total': 30
        })
        assert response.status_code == 201

        session.refresh(item)
        assert item.stock == 5

    def test_storage_charged_to_acting_clinic_only(self, session, authenticated_client, tenant1, tenant2):
        authenticated_client.post('/inventory', json={'name': 'Gauze', 'stock': 10})

        session.refresh(tenant1)
        session.refresh(tenant2)
        assert tenant1.storage_used_mb == pytest.approx(0.002)
        assert tenant2.storage_used_mb == 0.0
