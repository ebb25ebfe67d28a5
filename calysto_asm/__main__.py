from .kernel import CalystoAsm

if __name__ == '__main__':
    CalystoAsm.run_as_main()
