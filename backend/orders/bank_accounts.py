"""Bank accounts listed on the bank-transfer payment page"""
from backend.core.entity_store import EntityStore

BANK_ACCOUNTS_KEY = 'goldenglass_bank_accounts'

DEFAULT_BANK_ACCOUNTS = [
    {
        'id': '1',
        'bankName': 'Garanti BBVA',
        'accountHolder': 'Golden Glass 777 Ltd. Şti.',
        'iban': 'TR00 0000 0000 0000 0000 0000 00',
        'isActive': True,
    }
]


class BankAccountStore(EntityStore):
    storage_key = BANK_ACCOUNTS_KEY
    default_items = DEFAULT_BANK_ACCOUNTS

    def get_active_accounts(self):
        return [a for a in self.items if a.get('isActive')]
