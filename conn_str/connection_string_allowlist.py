"""
Copyright (c) Microsoft Corporation.
Licensed under the MIT license.

Connection string keyword allow-lists for conn_str.

Maps accepted keyword spellings to their canonical names for the SqlClient
(ADO.NET) and ODBC dialects. Passing one of these tables to the parser turns
synonyms into canonical keys and rejects everything else.
"""

from types import MappingProxyType
from typing import Mapping, Optional


class _ConnectionStringAllowList:
    """
    Synonym tables for strict parsing.

    Keys and canonical names are lower-case, because the parser lower-cases
    keys before the lookup. Every canonical name also maps to itself.
    """

    # Based on System.Data.SqlClient.SqlConnectionStringBuilder keywords
    SQLCLIENT_KEYWORDS = MappingProxyType({
        # Server identification
        'data source': 'data source',
        'server': 'data source',
        'address': 'data source',
        'addr': 'data source',
        'network address': 'data source',

        # Database
        'initial catalog': 'initial catalog',
        'database': 'initial catalog',

        # Authentication
        'user id': 'user id',
        'uid': 'user id',
        'user': 'user id',
        'password': 'password',
        'pwd': 'password',
        'integrated security': 'integrated security',
        'trusted_connection': 'integrated security',
        'persist security info': 'persist security info',
        'persistsecurityinfo': 'persist security info',
        'authentication': 'authentication',

        # Application name
        'application name': 'application name',
        'app': 'application name',

        # Encryption and Security
        'encrypt': 'encrypt',
        'trustservercertificate': 'trustservercertificate',

        # Connection behavior
        'multipleactiveresultsets': 'multipleactiveresultsets',
        'multisubnetfailover': 'multisubnetfailover',
        'applicationintent': 'applicationintent',
        'connect timeout': 'connect timeout',
        'connection timeout': 'connect timeout',
        'timeout': 'connect timeout',
        'connectretrycount': 'connectretrycount',
        'connectretryinterval': 'connectretryinterval',
        'packet size': 'packet size',
        'workstation id': 'workstation id',
        'wsid': 'workstation id',

        # Pooling
        'pooling': 'pooling',
        'min pool size': 'min pool size',
        'max pool size': 'max pool size',
    })

    # Based on ODBC Driver 18 for SQL Server keywords
    ODBC_KEYWORDS = MappingProxyType({
        'driver': 'driver',
        'dsn': 'dsn',

        # Server identification - addr, address, and server are synonyms
        'server': 'server',
        'address': 'server',
        'addr': 'server',

        'database': 'database',

        # Authentication
        'uid': 'uid',
        'pwd': 'pwd',
        'authentication': 'authentication',
        'trusted_connection': 'trusted_connection',

        'app': 'app',

        # Encryption and Security
        'encrypt': 'encrypt',
        'trustservercertificate': 'trustservercertificate',
        'hostnameincertificate': 'hostnameincertificate',
        'servercertificate': 'servercertificate',
        'serverspn': 'serverspn',

        # Connection behavior
        'multisubnetfailover': 'multisubnetfailover',
        'applicationintent': 'applicationintent',
        'connectretrycount': 'connectretrycount',
        'connectretryinterval': 'connectretryinterval',
        'mars_connection': 'mars_connection',

        # Keep-Alive (v17.4+)
        'keepalive': 'keepalive',
        'keepaliveinterval': 'keepaliveinterval',

        # IP Address Preference (v18.1+)
        'ipaddresspreference': 'ipaddresspreference',

        'packet size': 'packet size',
    })

    @classmethod
    def synonyms(cls, use_odbc_rules: bool = False) -> Mapping[str, str]:
        """
        Return the read-only synonym table for a dialect.

        Args:
            use_odbc_rules: Select the ODBC table instead of the SqlClient one
        """
        return cls.ODBC_KEYWORDS if use_odbc_rules else cls.SQLCLIENT_KEYWORDS

    @classmethod
    def normalize_key(cls, key: str, use_odbc_rules: bool = False) -> Optional[str]:
        """
        Normalize a parameter key to its canonical form.

        Args:
            key: Parameter key from connection string (case-insensitive)
            use_odbc_rules: Look the key up in the ODBC table

        Returns:
            Canonical parameter name if allowed, None otherwise

        Examples:
            >>> _ConnectionStringAllowList.normalize_key('SERVER')
            'data source'
            >>> _ConnectionStringAllowList.normalize_key('addr', use_odbc_rules=True)
            'server'
            >>> _ConnectionStringAllowList.normalize_key('UnsupportedParam')
            None
        """
        key_lower = key.lower().strip()
        return cls.synonyms(use_odbc_rules).get(key_lower)
