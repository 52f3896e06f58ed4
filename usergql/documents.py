"""GraphQL operation documents for the ``User`` entity.

Kept in step with :func:`usergql.codegen.render_document` for
``schema/user.graphql``; the test suite compares the two.
"""

CREATE_USER = """mutation createUser($name: String!, $email: String!, $password: String!) {
  createUser(name: $name, email: $email, password: $password) {
    id
    name
    email
    password
    createdAt
    updatedAt
  }
}"""

DELETE_USER = """mutation deleteUser($id: ID!) {
  deleteUser(id: $id) {
    id
    name
    email
    password
    createdAt
    updatedAt
  }
}"""

UPDATE_USER = """mutation updateUser($id: ID!, $name: String, $email: String, $password: String) {
  updateUser(id: $id, name: $name, email: $email, password: $password) {
    id
    name
    email
    password
    createdAt
    updatedAt
  }
}"""

USER = """query user($id: ID!) {
  user(id: $id) {
    id
    name
    email
    password
    createdAt
    updatedAt
  }
}"""

USERS = """query users {
  users {
    id
    name
    email
    password
    createdAt
    updatedAt
  }
}"""

QUERY_OPERATIONS = ("user", "users")
MUTATION_OPERATIONS = ("createUser", "deleteUser", "updateUser")
