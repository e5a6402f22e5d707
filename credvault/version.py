"""credvault Meta information.
   credvault keeps end-to-end test credentials encrypted at rest.
"""
__title__ = 'credvault'
__description__ = (
   'Encrypted-at-rest credentials for end-to-end test '
   'configuration files.'
)
__version__ = '0.3.0'
__license__ = 'Apache-2.0'
